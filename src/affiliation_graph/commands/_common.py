"""Shared utilities used across CLI command modules."""

import logging
import sys
from pathlib import Path
from typing import Callable

import click

from affiliation_graph.config import DEFAULT_RESOLUTION_CACHE, PipelineConfig


def _configure_logging(verbose: bool) -> None:
    """Configure logging for the importer."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger("affiliation_graph").setLevel(level)

    # Suppress noisy third-party loggers
    for noisy_logger in ["httpcore", "httpcore.http11", "httpcore.connection", "httpx"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)


def source_options(f: Callable) -> Callable:
    """Options locating records and caches, shared by every command."""
    options = [
        click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), help="Extracted summaries directory (<shard>/<orcid>.xml)"),
        click.option("--archive", "archive_path", type=click.Path(dir_okay=False, path_type=Path), help="ORCID summaries zip archive"),
        click.option("--archive-prefix", default="summaries", show_default=True, help="Directory of the shards inside the archive"),
        click.option("--extractor", type=click.Choice(["unzip", "zipfile"]), default="unzip", show_default=True, help="How to read archive members"),
        click.option("--aliases", "aliases_path", type=click.Path(dir_okay=False, path_type=Path), help='JSON alias table {"raw name": "canonical name"}'),
        click.option("--cache", "cache_path", type=click.Path(dir_okay=False, path_type=Path), default=DEFAULT_RESOLUTION_CACHE, show_default=True, help="Resolution cache file"),
        click.option("--aux-cache", "aux_cache_paths", type=click.Path(dir_okay=False, path_type=Path), multiple=True, help="Additional JSON cache to carry across runs"),
        click.option("-v", "--verbose", is_flag=True, help="Verbose output"),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def _build_config(cache_path: Path, aux_cache_paths: tuple[Path, ...], **options) -> PipelineConfig:
    """Build a PipelineConfig from command options named after its fields."""
    return PipelineConfig(
        resolution_cache_path=cache_path,
        aux_cache_paths=list(aux_cache_paths),
        **options,
    )
