# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Module host contracts and per-module metadata extraction."""

import logging
from collections.abc import Sequence
from typing import Protocol

from vstscan.model import AUDIO_EFFECT_CATEGORY, Record

logger = logging.getLogger(__name__)

NO_CLASSES_MESSAGE: str = "No plugin classes found"
CLASS_FLAGS_MASK: int = 0xFFFFFFFF


class ModuleOpenError(RuntimeError):
    """Represent a module that the host could not open."""


class ClassInfo(Protocol):
    """Describe one plugin class exported by a module."""

    name: str
    vendor: str
    version: str
    category: str
    sub_categories: Sequence[str]
    identifier: str
    sdk_version: str
    cardinality: int
    class_flags: int


class Module(Protocol):
    """Define an opened plugin module."""

    def list_classes(self) -> Sequence[ClassInfo]:
        """Return the plugin classes exported by the module."""


class ModuleHost(Protocol):
    """Define the plugin-hosting library boundary."""

    def open(self, path: str) -> Module:
        """Open a module.

        Args:
            path: Module path.

        Returns:
            Opened module.

        Raises:
            ModuleOpenError: If the module cannot be opened.
        """


class MetadataExtractor:
    """Extract one record per module path through a module host."""

    def __init__(self, host: ModuleHost) -> None:
        """Initialize extractor.

        Args:
            host: Module host used to open modules.
        """
        self._host = host

    def extract(self, path: str) -> Record:
        """Extract metadata for one module.

        Failures never propagate; they are encoded as invalid records.

        Args:
            path: Module path.

        Returns:
            Valid record for the selected class, or an invalid record.
        """
        try:
            module = self._host.open(path)
            classes = list(module.list_classes())
            if not classes:
                logger.warning(f"Module exports no classes (path={path})")
                return Record.failure(path, NO_CLASSES_MESSAGE)
            return _record_from_class(path, select_class(classes))
        except ModuleOpenError as exc:
            logger.warning(f"Module could not be opened (path={path} error={exc})")
            return Record.failure(path, str(exc) or "Module could not be opened")
        except Exception as exc:  # noqa: BLE001
            logger.warning(f"Module inspection failed (path={path} error={exc!r})")
            return Record.failure(path, str(exc) or type(exc).__name__)


def select_class(classes: Sequence[ClassInfo]) -> ClassInfo:
    """Pick the class a module is described by.

    Args:
        classes: Non-empty class listing in module order.

    Returns:
        First audio effect class, or the first class when none qualifies.
    """
    for class_info in classes:
        if class_info.category == AUDIO_EFFECT_CATEGORY:
            return class_info
    return classes[0]


def _record_from_class(path: str, class_info: ClassInfo) -> Record:
    return Record(
        path=path,
        is_valid=True,
        name=class_info.name,
        vendor=class_info.vendor,
        version=class_info.version,
        category=class_info.category,
        sub_categories=tuple(class_info.sub_categories),
        cid=class_info.identifier,
        sdk_version=class_info.sdk_version,
        cardinality=int(class_info.cardinality),
        flags=int(class_info.class_flags) & CLASS_FLAGS_MASK,
    )
