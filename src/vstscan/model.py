# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for scan records."""

from dataclasses import dataclass

AUDIO_EFFECT_CATEGORY: str = "Audio Module Class"


@dataclass(frozen=True)
class Record:
    """Represent the extracted (or failed) metadata of one scanned module.

    Attributes:
        path: Module path as discovered; identity key within a store.
        is_valid: Whether metadata extraction succeeded.
        name: Plugin class name.
        vendor: Plugin vendor.
        version: Plugin version string.
        category: Plugin class category.
        sub_categories: Ordered plugin sub-categories.
        cid: Class identifier.
        sdk_version: SDK version the plugin was built with.
        cardinality: Maximum number of instances (signed).
        flags: Class flag bit set (unsigned).
        error_message: Failure reason. Empty for valid records.
    """

    path: str
    is_valid: bool
    name: str = ""
    vendor: str = ""
    version: str = ""
    category: str = ""
    sub_categories: tuple[str, ...] = ()
    cid: str = ""
    sdk_version: str = ""
    cardinality: int = 0
    flags: int = 0
    error_message: str = ""

    @classmethod
    def failure(cls, path: str, message: str) -> "Record":
        """Build an invalid record carrying only a failure reason.

        Args:
            path: Module path.
            message: Human-readable failure reason.

        Returns:
            Record with ``is_valid=False``.
        """
        return cls(path=path, is_valid=False, error_message=message)
