"""
Two-pass import of ORCID records into the affiliation graph.

Pass 1 (warm-up) parses every record and registers its organizations, so
each canonical organization name has a settled org_id before anything is
written. Pass 2 (export) parses the same records again (served from the
resolution cache), rewrites their organizations from the registry and
commits one transaction per record.

Both passes walk the identifier list in file order; org_id assignment
depends on which record mentions an organization first.
"""

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Protocol

from .errors import GraphStoreError, MalformedRecord, UnresolvedOrganization
from .exporter import GraphExporter
from .models import PersonRecord
from .parser import RecordParser
from .registry import OrganizationRegistry
from .source import RecordSource

logger = logging.getLogger(__name__)


class Persistable(Protocol):
    def save(self) -> None: ...


def load_identifiers(path: str | Path) -> list[str]:
    """Read identifiers from a CSV file, one per cell, in file order."""
    identifiers = []
    with open(path, newline="", encoding="utf-8") as f:
        for row in csv.reader(f):
            identifiers.extend(cell.strip() for cell in row if cell.strip())
    logger.info(f"Loaded {len(identifiers)} identifiers from {path}")
    return identifiers


@dataclass
class RunStats:
    warmed: int = 0
    exported: int = 0
    absent: int = 0
    malformed: int = 0
    unresolved: int = 0
    store_errors: int = 0

    @property
    def failed(self) -> int:
        return self.malformed + self.unresolved + self.store_errors


class Orchestrator:
    """
    Drive the warm-up and export passes over an identifier list.

    Args:
        identifiers: ORCID iDs, in processing order.
        source: Resolves iDs to record bytes.
        parser: Turns record bytes into PersonRecords.
        registry: Organization registry shared by both passes.
        exporter: Commits records to the graph store.
        caches: Caches to persist once the run ends.
        continue_on_error: Skip records the graph store rejects instead
            of aborting the run.
    """

    def __init__(
        self,
        identifiers: Iterable[str],
        source: RecordSource,
        parser: RecordParser,
        registry: OrganizationRegistry,
        exporter: Optional[GraphExporter] = None,
        caches: Iterable[Persistable] = (),
        continue_on_error: bool = False,
    ):
        self.identifiers = list(identifiers)
        self.source = source
        self.parser = parser
        self.registry = registry
        self.exporter = exporter
        self.caches = list(caches)
        self.continue_on_error = continue_on_error
        self.stats = RunStats()

    def records(self, count_skipped: bool = False) -> Iterator[tuple[str, PersonRecord]]:
        """Yield ``(identifier, record)`` for every identifier that resolves and parses."""
        for identifier in self.identifiers:
            raw = self.source.resolve(identifier)
            if raw is None:
                logger.debug(f"{identifier}: no record, skipping")
                if count_skipped:
                    self.stats.absent += 1
                continue
            try:
                record = self.parser.parse(raw)
            except MalformedRecord as e:
                logger.warning(f"{identifier}: malformed record: {e}")
                if count_skipped:
                    self.stats.malformed += 1
                continue
            yield identifier, record

    def warm_up(self) -> None:
        logger.info(f"Warm-up pass over {len(self.identifiers)} identifiers")
        for _, record in self.records(count_skipped=True):
            self.registry.warm_up(record)
            self.stats.warmed += 1
        logger.info(f"Warm-up registered {len(self.registry)} organizations from {self.stats.warmed} records")

    def export(self) -> None:
        if self.exporter is None:
            raise ValueError("No exporter configured")

        logger.info(f"Export pass over {len(self.identifiers)} identifiers")
        for identifier, record in self.records():
            try:
                self.registry.normalize(record)
            except UnresolvedOrganization as e:
                logger.error(f"{identifier}: {e}")
                self.stats.unresolved += 1
                continue

            try:
                self.exporter.export(record)
            except GraphStoreError as e:
                self.stats.store_errors += 1
                logger.error(f"{identifier}: {e} (status={e.status_code})")
                logger.error(f"{identifier}: response body: {e.body}")
                logger.error(f"{identifier}: record: {record.model_dump_json()}")
                if not self.continue_on_error:
                    raise
                continue
            self.stats.exported += 1

        logger.info(f"Exported {self.stats.exported} records")

    def save(self) -> None:
        for cache in self.caches:
            cache.save()

    def close(self) -> None:
        self.source.close()

    def run(self) -> RunStats:
        """Run both passes, then persist caches and close the source even if the run aborted."""
        try:
            self.warm_up()
            self.export()
        finally:
            try:
                self.save()
            finally:
                self.close()
        return self.stats
