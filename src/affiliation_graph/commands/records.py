"""Inspection commands — look at records and organizations without writing to the graph."""

import json
from pathlib import Path

import click

from affiliation_graph.errors import AffiliationGraphError
from affiliation_graph.exporter import build_statements

from ._common import _build_config, _configure_logging, source_options


def _load_record(orcid: str, verbose: bool, options: dict):
    _configure_logging(verbose)
    orchestrator = _build_config(**options).build_orchestrator(identifiers=[orcid], with_exporter=False)
    try:
        raw = orchestrator.source.require(orcid)
        record = orchestrator.parser.parse(raw)
    except AffiliationGraphError as e:
        raise click.ClickException(str(e))
    finally:
        orchestrator.save()
        orchestrator.close()
    return orchestrator, record


@click.command("fetch")
@click.argument("orcid")
@source_options
def fetch_cmd(orcid: str, verbose: bool, **options):
    """
    Print the parsed record for ORCID as JSON.

    \b
    Examples:
        affiliation-graph fetch 0000-0002-1825-0097 --data-dir ORCID_2020_10_summaries
    """
    _, record = _load_record(orcid, verbose, options)
    click.echo(record.model_dump_json(indent=2))


@click.command("statements")
@click.argument("orcid")
@source_options
def statements_cmd(orcid: str, verbose: bool, **options):
    """
    Print the graph statements that would be committed for ORCID.

    Organizations are resolved from this record alone.
    """
    orchestrator, record = _load_record(orcid, verbose, options)
    orchestrator.registry.warm_up(record)
    orchestrator.registry.normalize(record)
    click.echo(json.dumps({"statements": build_statements(record)}, indent=2))


@click.command("orgs")
@click.argument("identifiers_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@source_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def orgs_cmd(identifiers_path: Path, verbose: bool, as_json: bool, **options):
    """
    Run the warm-up pass and print the deduplicated organizations.

    \b
    Examples:
        affiliation-graph orgs ORCIDs.csv --data-dir ORCID_2020_10_summaries --aliases org_matches.json
    """
    _configure_logging(verbose)
    orchestrator = _build_config(identifiers_path=identifiers_path, **options).build_orchestrator(with_exporter=False)
    try:
        orchestrator.warm_up()
    finally:
        orchestrator.save()
        orchestrator.close()

    orgs = orchestrator.registry.organizations()
    if as_json:
        click.echo(json.dumps([org.model_dump() for org in orgs], indent=2))
        return

    for org in orgs:
        click.echo(f"{org.org_id}\t{org.name}")
    click.echo(f"\n{len(orgs)} organizations from {orchestrator.stats.warmed} records", err=True)
