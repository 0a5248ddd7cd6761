# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""JSON scan document serialization and parsing."""

import json
import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TextIO

from vstscan.model import Record

logger = logging.getLogger(__name__)

_STRING_FIELDS: dict[str, str] = {
    "name": "name",
    "vendor": "vendor",
    "version": "version",
    "category": "category",
    "cid": "cid",
    "sdkVersion": "sdk_version",
}


class DocumentError(RuntimeError):
    """Represent a scan document that cannot be loaded."""


class DocumentCodec:
    """Convert records to and from the scan document format."""

    def __init__(self, clock: Callable[[], int] = time.time_ns) -> None:
        """Initialize codec.

        Args:
            clock: Source of the ``scanTime`` value.
        """
        self._clock = clock

    def dumps(self, records: Sequence[Record]) -> str:
        """Serialize records into document text.

        Args:
            records: Records in store order.

        Returns:
            JSON document text terminated by a newline.
        """
        payload = {
            "scanTime": str(self._clock()),
            "totalPlugins": len(records),
            "validPlugins": sum(1 for record in records if record.is_valid),
            "plugins": [_entry_from_record(record) for record in records],
        }
        return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"

    def write(self, records: Sequence[Record], stream: TextIO) -> None:
        """Write document text to a stream."""
        stream.write(self.dumps(records))

    def save(self, records: Sequence[Record], path: Path) -> None:
        """Write document to ``path``, replacing any previous content atomically.

        Args:
            records: Records in store order.
            path: Destination file path.

        Raises:
            OSError: If directory creation or file writing fails.
        """
        text = self.dumps(records)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(f"{path.name}.tmp")
        try:
            tmp_path.write_text(text, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            logger.warning(f"Failed writing scan document (path={path} error={exc})")
            tmp_path.unlink(missing_ok=True)
            raise

    def loads(self, text: str) -> list[Record]:
        """Parse document text into records.

        Unknown keys are ignored and missing keys keep their defaults. The
        header counters are not read back.

        Args:
            text: JSON document text.

        Returns:
            Records in document order.

        Raises:
            DocumentError: If the document or one of its fields is malformed.
        """
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DocumentError(f"Invalid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise DocumentError("Document top level must be an object")
        entries = payload.get("plugins", [])
        if not isinstance(entries, list):
            raise DocumentError("'plugins' must be an array")
        return [
            _record_from_entry(entry=entry, index=index)
            for index, entry in enumerate(entries)
        ]

    def load(self, path: Path) -> list[Record]:
        """Load records from a document file.

        Args:
            path: Document file path.

        Returns:
            Parsed records; empty when the file does not exist.

        Raises:
            DocumentError: If the file cannot be read or parsed.
        """
        if not path.exists():
            logger.info(f"Scan document does not exist yet (path={path})")
            return []
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(f"Failed reading scan document (path={path} error={exc})")
            raise DocumentError(f"Could not read {path}: {exc}") from exc
        try:
            return self.loads(text)
        except DocumentError as exc:
            logger.warning(f"Failed parsing scan document (path={path} error={exc})")
            raise DocumentError(f"{path}: {exc}") from exc


def _entry_from_record(record: Record) -> dict[str, Any]:
    entry: dict[str, Any] = {"path": record.path, "isValid": record.is_valid}
    if not record.is_valid:
        entry["error"] = record.error_message
        return entry
    entry.update(
        {
            "name": record.name,
            "vendor": record.vendor,
            "version": record.version,
            "category": record.category,
            "cid": record.cid,
            "sdkVersion": record.sdk_version,
            "cardinality": record.cardinality,
            "flags": record.flags,
            "subCategories": list(record.sub_categories),
        }
    )
    return entry


def _record_from_entry(entry: object, index: int) -> Record:
    """Build a record from one ``plugins`` entry.

    Args:
        entry: Decoded JSON value.
        index: Entry position, used in error messages.

    Returns:
        Parsed record.

    Raises:
        DocumentError: If the entry or one of its known fields is malformed.
    """
    if not isinstance(entry, dict):
        raise DocumentError(f"plugins[{index}] must be an object")
    path = _read_string(entry=entry, key="path", index=index)
    is_valid = entry.get("isValid") is True
    if not is_valid:
        return Record.failure(
            path, _read_string(entry=entry, key="error", index=index)
        )

    strings = {
        field_name: _read_string(entry=entry, key=key, index=index)
        for key, field_name in _STRING_FIELDS.items()
    }
    flags = _read_int(entry=entry, key="flags", index=index)
    if flags < 0:
        raise DocumentError(f"plugins[{index}].flags must not be negative")
    return Record(
        path=path,
        is_valid=True,
        sub_categories=_read_string_list(entry=entry, key="subCategories", index=index),
        cardinality=_read_int(entry=entry, key="cardinality", index=index),
        flags=flags,
        **strings,
    )


def _read_string(entry: dict[str, Any], key: str, index: int) -> str:
    value = entry.get(key, "")
    if not isinstance(value, str):
        raise DocumentError(f"plugins[{index}].{key} must be a string")
    return value


def _read_int(entry: dict[str, Any], key: str, index: int) -> int:
    value = entry.get(key, 0)
    if isinstance(value, bool):
        raise DocumentError(f"plugins[{index}].{key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise DocumentError(
                f"plugins[{index}].{key} must be an integer, got {value!r}"
            ) from exc
    raise DocumentError(f"plugins[{index}].{key} must be an integer, got {value!r}")


def _read_string_list(entry: dict[str, Any], key: str, index: int) -> tuple[str, ...]:
    value = entry.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise DocumentError(f"plugins[{index}].{key} must be an array of strings")
    return tuple(value)
