"""
Internet Explorer Bookmarks Extractor

Extracts favorites from .url shortcut files under Favorites folders.

A .url file is an INI-style text file; the line of interest looks like
``URL=http://path/to/website``. Everything after the first ``=`` is taken as
the bookmark URL.
"""

from __future__ import annotations

import io

from ....base import BaseExtractor, ExtractionContext, ExtractionResult, ExtractorMetadata
from ....callbacks import ExtractorCallbacks
from ...._shared.artifact_emitter import ArtifactBundle, ArtifactEmitter
from .._patterns import BOOKMARK_NAME_PATTERN, BOOKMARK_PATH_PATTERN
from core.enums import ArtifactType, AttributeType
from core.evidence_fs import FileHandle, FileLocator, StoreAccessError
from core.logging import get_logger
from core.messages import format_message

LOGGER = get_logger("extractors.browser.ie_legacy.bookmarks")


def read_bookmark_url(locator: FileLocator, handle: FileHandle) -> str:
    """
    Return the URL from a .url file, or "" when there is no URL line.

    Raises:
        OSError: If the file cannot be read
    """
    with locator.open_for_read(handle) as stream:
        text = io.TextIOWrapper(stream, encoding="utf-8", errors="replace")
        for line in text:
            line = line.rstrip("\r\n")
            if line.startswith("URL"):
                _, _, url = line.partition("=")
                return url
    return ""


class IEBookmarksExtractor(BaseExtractor):
    """Extract IE favorites as web bookmark artifacts."""

    @property
    def metadata(self) -> ExtractorMetadata:
        return ExtractorMetadata(
            name="ie_bookmarks",
            display_name="IE Bookmarks",
            description="Extract bookmarks from .url shortcut files",
            category="browser",
            requires_tools=[],  # Pure Python
            order=10,
        )

    def process(self, context: ExtractionContext, callbacks: ExtractorCallbacks) -> ExtractionResult:
        result = ExtractionResult()
        module = context.module_name
        callbacks.on_step("Extracting Internet Explorer bookmarks")

        try:
            favorites = context.locator.find_files(BOOKMARK_NAME_PATTERN, BOOKMARK_PATH_PATTERN)
        except StoreAccessError as exc:
            LOGGER.warning("Error fetching 'url' files for Internet Explorer bookmarks: %s", exc)
            return result.fail(format_message("locator.failed", module=module, what="bookmark"))

        if not favorites:
            LOGGER.info("Didn't find any IE bookmark files.")
            return result

        result.found_data = True
        emitter = ArtifactEmitter(
            context.blackboard, module, result.errors,
            self.settings_for(context).ignored_url_prefixes,
            routine_name=self.metadata.display_name,
        )

        for index, fav in enumerate(favorites, start=1):
            if fav.size == 0:
                continue
            if callbacks.is_cancelled():
                result.cancel()
                break

            callbacks.on_progress(index, len(favorites), f"Reading {fav.name}")
            try:
                url = read_bookmark_url(context.locator, fav)
            except (OSError, ValueError) as exc:
                LOGGER.warning("Failed to read from content: %s: %s", fav.name, exc)
                result.add_error(format_message("bookmark.read_failed", module=module, file=fav.name))
                url = ""

            bundle = ArtifactBundle(ArtifactType.WEB_BOOKMARK, fav)
            bundle.add(AttributeType.URL, url)
            bundle.add(AttributeType.TITLE, fav.name)
            bundle.add(AttributeType.DATETIME_CREATED, fav.crtime)
            bundle.add(AttributeType.PROG_NAME, module)
            bundle.attributes.extend(emitter.domain_attributes(url))
            emitter.add(bundle, error_key="bookmark.artifact_failed")

        emitter.flush()
        LOGGER.info("IE bookmarks: %d artifact(s) posted", emitter.posted_count)
        return result
