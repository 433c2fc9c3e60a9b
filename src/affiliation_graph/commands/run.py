"""Run command — full two-pass import into the graph store."""

from pathlib import Path

import click

from affiliation_graph.errors import GraphStoreError
from affiliation_graph.exporter import DEFAULT_ENDPOINT

from ._common import _build_config, _configure_logging, source_options


@click.command("run")
@click.argument("identifiers_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@source_options
@click.option("--endpoint", envvar="AFFILIATION_GRAPH_ENDPOINT", default=DEFAULT_ENDPOINT, show_default=True, help="Transactional commit endpoint of the graph store")
@click.option("--http-timeout", type=float, default=120, show_default=True, help="Seconds to wait for each transaction")
@click.option("--extract-timeout", type=float, default=300, show_default=True, help="Seconds to wait for each archive extraction")
@click.option("--continue-on-error", is_flag=True, help="Skip records the graph store rejects instead of stopping")
@click.option("--clear-affiliations", is_flag=True, help="Delete all AFFILIATED_WITH edges before exporting")
def run_cmd(identifiers_path: Path, verbose: bool, clear_affiliations: bool, **options):
    """
    Import the affiliations of every ORCID iD in IDENTIFIERS_PATH.

    The first pass registers organizations from all records; the second
    writes one transaction per record. Caches are saved at the end even
    when the run stops on a graph store error.

    Re-running creates the AFFILIATED_WITH edges again. Pass
    --clear-affiliations to start from a graph without them.

    \b
    Examples:
        affiliation-graph run ORCIDs.csv --data-dir ORCID_2020_10_summaries --aliases org_matches.json
        affiliation-graph run ORCIDs.csv --archive ORCID_2019_summaries.zip --extractor zipfile
    """
    _configure_logging(verbose)

    config = _build_config(identifiers_path=identifiers_path, **options)
    orchestrator = config.build_orchestrator()

    if clear_affiliations:
        try:
            orchestrator.exporter.clear_affiliations()
        except GraphStoreError as e:
            raise click.ClickException(f"Failed to clear affiliations: {e}")

    try:
        stats = orchestrator.run()
    except GraphStoreError as e:
        raise click.ClickException(
            f"Graph store rejected a record, stopping (use --continue-on-error to skip): {e}"
        )

    click.echo(
        f"Exported {stats.exported} records "
        f"({stats.absent} missing, {stats.malformed} malformed, "
        f"{stats.unresolved} unresolved, {stats.store_errors} rejected).",
        err=True,
    )
