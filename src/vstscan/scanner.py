# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Scan orchestration for fresh and cumulative runs."""

import concurrent.futures
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, TextIO

from vstscan.codec import DocumentCodec
from vstscan.discovery import DiscoveryError, PluginDiscoverer
from vstscan.extractor import MetadataExtractor
from vstscan.model import Record
from vstscan.store import RecordStore

logger = logging.getLogger(__name__)

ScanMode = Literal["fresh", "cumulative"]


class ConfigurationError(RuntimeError):
    """Represent an invalid combination of run options."""


@dataclass(frozen=True)
class ScanConfig:
    """Describe one scan run.

    Attributes:
        directory: Root directory to scan.
        output_path: Fresh-mode output file; ``None`` writes to stdout.
        cumulative_path: Cumulative document to read, merge and rewrite.
        jobs: Number of concurrent extractions.
    """

    directory: str
    output_path: Path | None = None
    cumulative_path: Path | None = None
    jobs: int = 1

    @property
    def mode(self) -> ScanMode:
        return "cumulative" if self.cumulative_path is not None else "fresh"

    def validate(self) -> None:
        """Check option consistency.

        Raises:
            ConfigurationError: If the options cannot be combined.
        """
        if not self.directory:
            raise ConfigurationError("Directory path is required")
        if self.output_path is not None and self.cumulative_path is not None:
            raise ConfigurationError("Cannot use both -o and -c options")
        if self.jobs < 1:
            raise ConfigurationError("jobs must be > 0")


@dataclass(frozen=True)
class ScanSummary:
    """Represent the outcome of one scan run."""

    mode: ScanMode
    discovered: int
    existing: int
    added: int
    total: int
    valid: int
    discovery_errors: list[DiscoveryError]
    destination: str


class ScanPipeline:
    """Run discovery, extraction, merge and document write in sequence."""

    def __init__(
        self,
        discoverer: PluginDiscoverer,
        extractor: MetadataExtractor,
        codec: DocumentCodec,
        progress_batch_size: int = 10,
    ) -> None:
        """Initialize pipeline.

        Args:
            discoverer: Module discoverer.
            extractor: Per-module metadata extractor.
            codec: Scan document codec.
            progress_batch_size: Emit progress log line every N extractions.

        Raises:
            ValueError: If ``progress_batch_size`` is not greater than zero.
        """
        if progress_batch_size <= 0:
            raise ValueError("progress_batch_size must be > 0")
        self._discoverer = discoverer
        self._extractor = extractor
        self._codec = codec
        self._progress_batch_size = progress_batch_size

    def run(self, config: ScanConfig, stdout: TextIO) -> ScanSummary:
        """Execute one scan run.

        Fresh mode starts from an empty store; cumulative mode starts from
        the records of ``config.cumulative_path``.

        Args:
            config: Run configuration.
            stdout: Stream receiving the document when no file is configured.

        Returns:
            Run summary.

        Raises:
            ConfigurationError: If ``config`` is inconsistent.
            DocumentError: If the cumulative document cannot be loaded.
            OSError: If the document cannot be written.
        """
        config.validate()
        store = RecordStore()
        if config.cumulative_path is not None:
            logger.info(f"Loading existing plugins (path={config.cumulative_path})")
            store = RecordStore(self._codec.load(config.cumulative_path))
            logger.info(f"Found existing plugins (count={len(store)})")
        existing = len(store)

        logger.info(f"Scanning directory (path={config.directory})")
        paths, errors = self._discoverer.find(config.directory)
        logger.info(f"Found VST files (count={len(paths)})")

        added = store.merge(self.extract_all(paths=paths, jobs=config.jobs))
        logger.info(
            f"Merged scan results (mode={config.mode} scanned={len(paths)} "
            f"existing={existing} added={added} total={len(store)})"
        )

        destination = config.cumulative_path or config.output_path
        if destination is None:
            self._codec.write(store.records, stdout)
            destination_text = "<stdout>"
        else:
            self._codec.save(store.records, destination)
            destination_text = str(destination)
            logger.info(f"Results written (path={destination})")

        return ScanSummary(
            mode=config.mode,
            discovered=len(paths),
            existing=existing,
            added=added,
            total=len(store),
            valid=store.valid_count,
            discovery_errors=errors,
            destination=destination_text,
        )

    def extract_all(self, paths: list[str], jobs: int = 1) -> list[Record]:
        """Extract records for all paths, preserving discovery order.

        Args:
            paths: Discovered module paths.
            jobs: Number of concurrent extractions.

        Returns:
            One record per path, in ``paths`` order.
        """
        total = len(paths)
        if jobs <= 1:
            records: list[Record] = []
            failed = 0
            for path in paths:
                logger.debug(f"Scanning module (path={path})")
                record = self._extractor.extract(path)
                records.append(record)
                failed += 0 if record.is_valid else 1
                self._maybe_log_progress(len(records), total, failed)
            return records

        results: list[Record | None] = [None] * total
        completed = 0
        failed = 0
        with concurrent.futures.ThreadPoolExecutor(max_workers=jobs) as executor:
            future_to_index = {
                executor.submit(self._extractor.extract, path): index
                for index, path in enumerate(paths)
            }
            for future in concurrent.futures.as_completed(future_to_index):
                record = future.result()
                results[future_to_index[future]] = record
                completed += 1
                failed += 0 if record.is_valid else 1
                self._maybe_log_progress(completed, total, failed)
        return [record for record in results if record is not None]

    def _maybe_log_progress(self, completed: int, total: int, failed: int) -> None:
        if completed % self._progress_batch_size != 0 and completed != total:
            return
        percent = 100.0 if total == 0 else (completed / total) * 100.0
        logger.info(
            "scan_progress completed=%s total=%s failed=%s percent=%.2f",
            completed,
            total,
            failed,
            percent,
        )
