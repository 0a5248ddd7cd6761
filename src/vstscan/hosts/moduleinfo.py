# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Module host backed by the ``moduleinfo.json`` file of VST3 bundles."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from vstscan.extractor import ModuleOpenError

logger = logging.getLogger(__name__)

BUNDLE_SUFFIX: str = ".vst3"
MODULE_INFO_RELATIVE_PATH: Path = Path("Contents") / "Resources" / "moduleinfo.json"


@dataclass(frozen=True)
class ModuleInfoClass:
    """Represent one entry of the ``Classes`` array.

    Attributes:
        name: Class name.
        vendor: Class vendor, or the factory vendor when the class has none.
        version: Class version.
        category: Class category.
        sub_categories: Ordered sub-categories.
        identifier: Class identifier (CID).
        sdk_version: SDK version string.
        cardinality: Maximum instance count.
        class_flags: Class flag bit set.
    """

    name: str
    vendor: str
    version: str
    category: str
    sub_categories: tuple[str, ...]
    identifier: str
    sdk_version: str
    cardinality: int
    class_flags: int


@dataclass(frozen=True)
class ModuleInfo:
    """Represent a parsed ``moduleinfo.json`` document."""

    bundle_path: Path
    classes: tuple[ModuleInfoClass, ...]

    def list_classes(self) -> tuple[ModuleInfoClass, ...]:
        return self.classes


class ModuleInfoHost:
    """Open VST3 bundles by reading their shipped module metadata."""

    def open(self, path: str) -> ModuleInfo:
        """Open the bundle that contains ``path``.

        Args:
            path: Discovered module path; the bundle itself or a file inside it.

        Returns:
            Parsed module metadata.

        Raises:
            ModuleOpenError: If no bundle or metadata can be found or parsed.
        """
        bundle_path = find_bundle_root(Path(path))
        if bundle_path is None:
            raise ModuleOpenError(f"Not inside a VST3 bundle: {path}")
        info_path = bundle_path / MODULE_INFO_RELATIVE_PATH
        if not info_path.is_file():
            raise ModuleOpenError(f"Bundle has no moduleinfo.json: {bundle_path}")
        try:
            payload = json.loads(info_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(f"Failed to read module info (path={info_path} error={exc})")
            raise ModuleOpenError(f"Could not read {info_path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            logger.warning(f"Malformed module info (path={info_path} error={exc})")
            raise ModuleOpenError(f"Malformed moduleinfo.json: {exc}") from exc
        if not isinstance(payload, dict):
            raise ModuleOpenError("Malformed moduleinfo.json: top level is not an object")
        return ModuleInfo(
            bundle_path=bundle_path, classes=_parse_classes(payload=payload)
        )


def find_bundle_root(path: Path) -> Path | None:
    """Return the nearest ``*.vst3`` directory at or above ``path``.

    Args:
        path: Candidate module path.

    Returns:
        Bundle directory, or ``None`` when ``path`` is not inside a bundle.
    """
    for candidate in (path, *path.parents):
        if candidate.suffix == BUNDLE_SUFFIX and candidate.is_dir():
            return candidate
    return None


def _parse_classes(payload: dict[str, Any]) -> tuple[ModuleInfoClass, ...]:
    factory_info = payload.get("Factory Info")
    factory_vendor = ""
    if isinstance(factory_info, dict):
        factory_vendor = str(factory_info.get("Vendor", ""))
    raw_classes = payload.get("Classes", [])
    if not isinstance(raw_classes, list):
        raise ModuleOpenError("Malformed moduleinfo.json: Classes is not a list")

    classes: list[ModuleInfoClass] = []
    for raw in raw_classes:
        if not isinstance(raw, dict):
            raise ModuleOpenError("Malformed moduleinfo.json: class is not an object")
        sub_categories = raw.get("Sub Categories", [])
        if isinstance(sub_categories, str):
            sub_categories = [sub_categories]
        try:
            classes.append(
                ModuleInfoClass(
                    name=str(raw.get("Name", "")),
                    vendor=str(raw.get("Vendor") or factory_vendor),
                    version=str(raw.get("Version", "")),
                    category=str(raw.get("Category", "")),
                    sub_categories=tuple(str(item) for item in sub_categories),
                    identifier=str(raw.get("CID", "")),
                    sdk_version=str(raw.get("SDKVersion", "")),
                    cardinality=int(raw.get("Cardinality", 0)),
                    class_flags=int(raw.get("Class Flags", 0)),
                )
            )
        except (TypeError, ValueError) as exc:
            raise ModuleOpenError(f"Malformed moduleinfo.json class: {exc}") from exc
    return tuple(classes)
