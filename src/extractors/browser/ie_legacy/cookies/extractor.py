"""
Internet Explorer Cookies Extractor

Extracts cookies from the per-cookie .txt files IE keeps under Cookies
folders. The first three lines of each file are the cookie name, its value
and the host/path it belongs to; the remaining lines (flags, expiry and
creation FILETIMEs) are not used.
"""

from __future__ import annotations

from typing import List

from ....base import BaseExtractor, ExtractionContext, ExtractionResult, ExtractorMetadata
from ....callbacks import ExtractorCallbacks
from ...._shared.artifact_emitter import ArtifactBundle, ArtifactEmitter
from .._patterns import COOKIE_NAME_PATTERN, COOKIE_PATH_PATTERN
from core.enums import ArtifactType, AttributeType
from core.evidence_fs import StoreAccessError
from core.logging import get_logger
from core.messages import format_message

LOGGER = get_logger("extractors.browser.ie_legacy.cookies")


def split_cookie_lines(data: bytes) -> List[str]:
    """Split cookie file content into lines, dropping carriage returns."""
    return [line.rstrip("\r") for line in data.decode("utf-8", errors="replace").split("\n")]


def _field(values: List[str], index: int) -> str:
    return values[index] if len(values) > index else ""


class IECookiesExtractor(BaseExtractor):
    """Extract IE cookie files as web cookie artifacts."""

    @property
    def metadata(self) -> ExtractorMetadata:
        return ExtractorMetadata(
            name="ie_cookies",
            display_name="IE Cookies",
            description="Extract cookies from Cookies/*.txt files",
            category="browser",
            requires_tools=[],
            order=20,
        )

    def process(self, context: ExtractionContext, callbacks: ExtractorCallbacks) -> ExtractionResult:
        result = ExtractionResult()
        module = context.module_name
        callbacks.on_step("Extracting Internet Explorer cookies")

        try:
            cookie_files = context.locator.find_files(COOKIE_NAME_PATTERN, COOKIE_PATH_PATTERN)
        except StoreAccessError as exc:
            LOGGER.warning("Error getting cookie files for IE: %s", exc)
            return result.fail(format_message("locator.failed", module=module, what="cookie"))

        if not cookie_files:
            LOGGER.info("Didn't find any IE cookies files.")
            return result

        result.found_data = True
        emitter = ArtifactEmitter(
            context.blackboard, module, result.errors,
            self.settings_for(context).ignored_url_prefixes,
            routine_name=self.metadata.display_name,
        )

        for index, cookie_file in enumerate(cookie_files, start=1):
            if callbacks.is_cancelled():
                result.cancel()
                break
            if cookie_file.size == 0:
                continue

            callbacks.on_progress(index, len(cookie_files), f"Reading {cookie_file.name}")
            try:
                values = split_cookie_lines(context.locator.read_bytes(cookie_file))
            except (OSError, ValueError) as exc:
                LOGGER.warning("Error reading bytes of Internet Explorer cookie %s: %s", cookie_file.name, exc)
                result.add_error(format_message("cookie.read_failed", module=module, file=cookie_file.name))
                continue

            url = _field(values, 2)
            bundle = ArtifactBundle(ArtifactType.WEB_COOKIE, cookie_file)
            bundle.add(AttributeType.DATETIME, cookie_file.crtime)
            bundle.add(AttributeType.NAME, _field(values, 0))
            bundle.add(AttributeType.VALUE, _field(values, 1))
            bundle.add(AttributeType.URL, url)
            bundle.add(AttributeType.PROG_NAME, module)
            bundle.attributes.extend(emitter.domain_attributes(url))
            emitter.add(bundle, error_key="cookie.artifact_failed")

        emitter.flush()
        LOGGER.info("IE cookies: %d artifact(s) posted", emitter.posted_count)
        return result
