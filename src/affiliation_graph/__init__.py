"""
Import ORCID employment affiliations into a person-organization graph.

Records are read from the ORCID public data summaries (an extracted tree
or the zip archive), organizations are reconciled through an alias table,
and each person is written to a Neo4j-compatible graph store over HTTP.
"""

__version__ = "0.1.0"

from affiliation_graph.cache import JsonCache
from affiliation_graph.errors import (
    AffiliationGraphError,
    ExtractionFailure,
    GraphStoreError,
    MalformedRecord,
    MissingRecord,
    UnresolvedOrganization,
)
from affiliation_graph.models import Employment, OrganizationRef, PersonRecord
from affiliation_graph.parser import RecordParser, parse
from affiliation_graph.registry import AliasTable, OrganizationRegistry, derive_org_id
from affiliation_graph.source import RecordSource, UnzipExtractor, ZipFileExtractor
from affiliation_graph.exporter import GraphExporter, GraphStoreClient, build_statements
from affiliation_graph.pipeline import Orchestrator, RunStats, load_identifiers
from affiliation_graph.config import PipelineConfig

__all__ = [
    # Models
    "Employment",
    "OrganizationRef",
    "PersonRecord",
    # Errors
    "AffiliationGraphError",
    "ExtractionFailure",
    "GraphStoreError",
    "MalformedRecord",
    "MissingRecord",
    "UnresolvedOrganization",
    # Components
    "JsonCache",
    "RecordSource",
    "UnzipExtractor",
    "ZipFileExtractor",
    "RecordParser",
    "parse",
    "AliasTable",
    "OrganizationRegistry",
    "derive_org_id",
    "GraphExporter",
    "GraphStoreClient",
    "build_statements",
    # Pipeline
    "Orchestrator",
    "RunStats",
    "load_identifiers",
    "PipelineConfig",
]
