"""
Extractor registry for auto-discovery and management.
"""

from typing import Any, Dict, List, Mapping, Optional, Set
import importlib
import pkgutil

from .base import BaseExtractor
from core.logging import get_logger

LOGGER = get_logger("extractors.registry")

# Group directories that contain nested extractors
GROUP_DIRECTORIES: Set[str] = {
    'browser',  # browser/ie_legacy/
}


class ExtractorRegistry:
    """
    Central registry for all extraction routines.

    Discovery convention:
        - Each routine lives in extractors/browser/{family}/{artifact}/
        - Its __init__.py exports {Family}{Artifact}Extractor
          (browser/ie_legacy/history -> IeLegacyHistoryExtractor)
        - The class inherits from BaseExtractor

    Usage:
        registry = ExtractorRegistry()

        history = registry.get("ie_history")

        # Routines in run order
        for routine in registry.get_all():
            print(routine.metadata.display_name)

        # Fresh, configured instances for one pipeline run
        routines = registry.create_routines({"ie_history": {...}})
    """

    def __init__(self, package: str = "extractors"):
        self._package_import_prefix = package
        self._modules: Dict[str, BaseExtractor] = {}
        self._discover_modules()

    def _discover_modules(self):
        """
        Discover routines under each group directory.

        Modules that fail to import are logged and skipped so one broken
        routine does not hide the others.
        """
        for group_name in sorted(GROUP_DIRECTORIES):
            group_path = f"{self._package_import_prefix}.{group_name}"
            try:
                group_module = importlib.import_module(group_path)
            except ImportError as exc:
                LOGGER.warning("Failed to import extractor group '%s': %s", group_path, exc)
                continue

            group_paths = getattr(group_module, "__path__", None)
            if group_paths:
                self._discover_family_modules(group_paths, group_name)

    def _discover_family_modules(self, group_paths, group_name: str):
        """
        Discover extractors with 3-level nesting: group/family/artifact/.

        Example: browser/ie_legacy/history/ → IeLegacyHistoryExtractor
        """
        for _, family_name, ispkg in pkgutil.iter_modules(group_paths):
            if not ispkg or family_name.startswith('_'):
                continue

            family_module_path = f"{self._package_import_prefix}.{group_name}.{family_name}"
            try:
                family_module = importlib.import_module(family_module_path)
            except ImportError as exc:
                LOGGER.warning("Failed to import extractor family '%s': %s", family_module_path, exc)
                continue

            family_paths = getattr(family_module, "__path__", None)
            if not family_paths:
                continue

            for _, artifact_name, artifact_ispkg in pkgutil.iter_modules(family_paths):
                if not artifact_ispkg or artifact_name.startswith('_'):
                    continue

                nested_module_path = f"{group_name}.{family_name}.{artifact_name}"
                try:
                    self._load_nested_module(nested_module_path, family_name, artifact_name)
                except (ImportError, ValueError, TypeError) as exc:
                    LOGGER.warning("Failed to load extractor '%s': %s", nested_module_path, exc)

    def _load_nested_module(self, nested_path: str, family_name: str, artifact_name: str):
        """
        Load a nested extractor module from a group directory.

        Args:
            nested_path: Dotted path within extractors (e.g., "browser.ie_legacy.history")
            family_name: Name of the family (e.g., "ie_legacy")
            artifact_name: Name of the artifact (e.g., "history")
        """
        module_path = f'{self._package_import_prefix}.{nested_path}'
        module = importlib.import_module(module_path)

        class_name = self._module_name_to_class_name(f"{family_name}_{artifact_name}")
        extractor_class = getattr(module, class_name, None)

        if extractor_class is None:
            raise ValueError(
                f"Module '{nested_path}' does not export '{class_name}'"
            )

        if not (isinstance(extractor_class, type) and issubclass(extractor_class, BaseExtractor)):
            raise ValueError(
                f"Class '{class_name}' does not inherit from BaseExtractor"
            )

        instance = extractor_class()
        self._modules[instance.metadata.name] = instance
        LOGGER.debug("Registered extractor %s from %s", instance.metadata.name, nested_path)

    def _module_name_to_class_name(self, module_name: str) -> str:
        """
        Convert module name to expected class name.

        Examples:
            ie_legacy_history → IeLegacyHistoryExtractor
            ie_legacy_bookmarks → IeLegacyBookmarksExtractor
        """
        parts = module_name.split('_')
        capitalized = ''.join(word.capitalize() for word in parts)
        return f"{capitalized}Extractor"

    def get(self, name: str) -> Optional[BaseExtractor]:
        """
        Get extractor by name.

        Example:
            history = registry.get("ie_history")
        """
        return self._modules.get(name)

    def get_all(self) -> List[BaseExtractor]:
        """Get all registered extractors in run order."""
        return sorted(
            self._modules.values(),
            key=lambda extractor: (extractor.metadata.order, extractor.metadata.name),
        )

    def get_by_category(self, category: str) -> List[BaseExtractor]:
        """Get extractors in a specific category, in run order."""
        return [
            extractor
            for extractor in self.get_all()
            if extractor.metadata.category == category
        ]

    def list_names(self) -> List[str]:
        return [extractor.metadata.name for extractor in self.get_all()]

    def create_routines(
        self,
        options: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> List[BaseExtractor]:
        """
        Build fresh routine instances in run order.

        Args:
            options: Routine name -> options passed to ``configure``

        Returns:
            New instances, so concurrent pipelines never share routine state
        """
        options = options or {}
        routines: List[BaseExtractor] = []
        for registered in self.get_all():
            routine = type(registered)()
            routine.configure(options.get(registered.metadata.name))
            routines.append(routine)
        return routines

    def count(self) -> int:
        return len(self._modules)
