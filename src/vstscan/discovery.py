# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Plugin module discovery over a directory tree."""

import logging
import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

FileFilter = Callable[[str, str], bool]
"""Predicate over ``(extension, filename)`` selecting candidate modules."""


@dataclass(frozen=True)
class DiscoveryError:
    """Represent a traversal error for one path."""

    path: str
    message: str


def extension_filter(extensions: Iterable[str]) -> FileFilter:
    """Build a filter accepting files with one of the given extensions.

    Args:
        extensions: Extensions including the leading dot, e.g. ``.vst3``.

    Returns:
        File filter predicate.
    """
    accepted = frozenset(extensions)

    def _matches(extension: str, filename: str) -> bool:
        return extension in accepted

    return _matches


def _windows_filter(extension: str, filename: str) -> bool:
    return extension == ".vst3" or (extension == "" and ".vst3" in filename)


PLATFORM_FILTERS: dict[str, FileFilter] = {
    "Windows": _windows_filter,
    "Darwin": extension_filter((".vst3", ".bundle")),
    "Linux": extension_filter((".vst3", ".so")),
}


def platform_filter(system: str) -> FileFilter:
    """Return the default module filter for a platform.

    Args:
        system: Value as reported by ``platform.system()``.

    Returns:
        File filter for the platform; Linux rules for unknown systems.
    """
    return PLATFORM_FILTERS.get(system, PLATFORM_FILTERS["Linux"])


class PluginDiscoverer:
    """Find candidate plugin modules beneath a root directory."""

    def __init__(self, file_filter: FileFilter) -> None:
        """Initialize discoverer.

        Args:
            file_filter: Predicate selecting candidate files.
        """
        self._file_filter = file_filter

    def find(self, root: str) -> tuple[list[str], list[DiscoveryError]]:
        """Walk ``root`` recursively and collect matching regular files.

        Traversal is best-effort: unreadable directories are reported and
        skipped, the walk continues with everything else.

        Args:
            root: Directory to scan.

        Returns:
            A tuple of matching file paths and traversal errors.
        """
        paths: list[str] = []
        errors: list[DiscoveryError] = []

        def _on_error(exc: OSError) -> None:
            error_path = str(exc.filename) if exc.filename is not None else root
            logger.warning(
                f"Skipping unreadable path during discovery (path={error_path} error={exc})"
            )
            errors.append(DiscoveryError(path=error_path, message=str(exc)))

        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            dirnames.sort()
            for filename in sorted(filenames):
                file_path = os.path.join(dirpath, filename)
                if not os.path.isfile(file_path):
                    continue
                extension = os.path.splitext(filename)[1]
                if self._file_filter(extension, filename):
                    paths.append(file_path)

        logger.debug(
            f"Discovery completed (root={root} paths={len(paths)} errors={len(errors)})"
        )
        return paths, errors
