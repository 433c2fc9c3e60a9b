"""CLI commands package — main click group and command registration."""

import click

from affiliation_graph import __version__


@click.group()
@click.version_option(version=__version__)
def main():
    """
    Import ORCID employment affiliations into a graph store.

    \b
    Commands:
        run         Warm up the organization registry, then export all records
        fetch       Print one parsed record as JSON
        orgs        Print the deduplicated organization table
        statements  Print the graph statements for one record

    \b
    Examples:
        affiliation-graph run ORCIDs.csv --data-dir ORCID_2020_10_summaries --aliases org_matches.json
        affiliation-graph run ORCIDs.csv --archive ORCID_2019_summaries.zip --continue-on-error
        affiliation-graph fetch 0000-0002-1825-0097 --archive ORCID_2019_summaries.zip
        affiliation-graph orgs ORCIDs.csv --data-dir ORCID_2020_10_summaries
    """


# Register all commands
from .run import run_cmd

main.add_command(run_cmd)

from .records import fetch_cmd, orgs_cmd, statements_cmd

main.add_command(fetch_cmd)
main.add_command(orgs_cmd)
main.add_command(statements_cmd)
