"""Pipeline configuration and component wiring."""

import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel

from .cache import JsonCache
from .exporter import DEFAULT_ENDPOINT, GraphExporter, GraphStoreClient
from .parser import RecordParser
from .pipeline import Orchestrator, load_identifiers
from .registry import AliasTable, OrganizationRegistry
from .source import (
    DEFAULT_ARCHIVE_PREFIX,
    DEFAULT_EXTRACT_TIMEOUT,
    ArchiveExtractor,
    RecordSource,
    UnzipExtractor,
    ZipFileExtractor,
)

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "affiliation-graph"
DEFAULT_RESOLUTION_CACHE = DEFAULT_CACHE_DIR / "orcid_cache.json"


class PipelineConfig(BaseModel):
    """Everything needed to run an import."""

    identifiers_path: Optional[Path] = None
    data_dir: Optional[Path] = None
    archive_path: Optional[Path] = None
    archive_prefix: str = DEFAULT_ARCHIVE_PREFIX
    extractor: Literal["unzip", "zipfile"] = "unzip"
    extract_timeout: float = DEFAULT_EXTRACT_TIMEOUT
    aliases_path: Optional[Path] = None
    resolution_cache_path: Path = DEFAULT_RESOLUTION_CACHE
    aux_cache_paths: list[Path] = []
    endpoint: str = DEFAULT_ENDPOINT
    http_timeout: float = 120
    continue_on_error: bool = False

    def build_extractor(self) -> Optional[ArchiveExtractor]:
        if self.archive_path is None:
            return None
        if self.extractor == "zipfile":
            return ZipFileExtractor(self.archive_path)
        return UnzipExtractor(self.archive_path, timeout=self.extract_timeout)

    def build_source(self, cache: JsonCache) -> RecordSource:
        if self.data_dir is None and self.archive_path is None:
            logger.warning("Neither a data directory nor an archive is configured; only cached records resolve")
        return RecordSource(
            cache,
            data_dir=self.data_dir,
            extractor=self.build_extractor(),
            archive_prefix=self.archive_prefix,
        )

    def build_orchestrator(
        self,
        identifiers: Optional[list[str]] = None,
        with_exporter: bool = True,
    ) -> Orchestrator:
        """Load caches and the alias table, and wire the pipeline components."""
        if identifiers is None:
            if self.identifiers_path is None:
                raise ValueError("No identifier list configured")
            identifiers = load_identifiers(self.identifiers_path)

        resolution_cache = JsonCache.load(self.resolution_cache_path)
        aux_caches = [JsonCache.load(p) for p in self.aux_cache_paths]

        exporter = None
        if with_exporter:
            exporter = GraphExporter(GraphStoreClient(self.endpoint, timeout=self.http_timeout))

        return Orchestrator(
            identifiers,
            source=self.build_source(resolution_cache),
            parser=RecordParser(),
            registry=OrganizationRegistry(AliasTable.load(self.aliases_path)),
            exporter=exporter,
            caches=[resolution_cache, *aux_caches],
            continue_on_error=self.continue_on_error,
        )
