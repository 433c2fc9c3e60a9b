"""
Write person records to a Neo4j-compatible graph store over HTTP.

Each record becomes one transaction posted to the transactional commit
endpoint: a MERGE for the person, then for every employment a MERGE for
the organization and a CREATE for the AFFILIATED_WITH edge.

Person and organization nodes are idempotent across re-runs. Edges are
not: exporting the same record twice creates the edge twice. Call
:meth:`GraphExporter.clear_affiliations` first when a clean re-run is
needed.
"""

import json
import logging
from typing import Any

import httpx

from .errors import GraphStoreError
from .models import PersonRecord

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://localhost:7474/db/data/transaction/commit"
_TIMEOUT = 120  # seconds per transaction

HEADERS = {
    "Accept": "application/json; charset=utf-8",
    "Content-Type": "application/json",
}

MERGE_PERSON = """
MERGE (p:Person {orcid: $person.orcid, first_name: $person.first_name, last_name: $person.last_name})
RETURN p
""".strip()

MERGE_ORGANIZATION = """
MERGE (o:Organization {org_id: $org_id, name: $name})
RETURN o
""".strip()

CREATE_AFFILIATION = """
MATCH (p:Person {orcid: $orcid}),(o:Organization {org_id: $org_id})
CREATE (p)-[r:AFFILIATED_WITH]->(o)
RETURN r
""".strip()

DELETE_AFFILIATIONS = """
MATCH (:Person)-[r:AFFILIATED_WITH]->(:Organization)
DELETE r
""".strip()


def statement(query: str, parameters: dict[str, Any]) -> dict[str, Any]:
    return {"statement": query, "parameters": parameters}


def build_statements(record: PersonRecord) -> list[dict[str, Any]]:
    """Build the statements of one record's transaction, in execution order."""
    statements = [statement(MERGE_PERSON, {"person": record.model_dump_for_graph()})]

    for employment in record.employments:
        org = employment.organization
        statements.append(statement(MERGE_ORGANIZATION, org.model_dump_for_graph()))
        statements.append(statement(CREATE_AFFILIATION, {"orcid": record.orcid, "org_id": org.org_id}))

    return statements


class GraphStoreClient:
    """Client for the graph store's transactional HTTP endpoint."""

    def __init__(self, endpoint: str = DEFAULT_ENDPOINT, timeout: float = _TIMEOUT):
        self.endpoint = endpoint
        self.timeout = timeout

    def commit(self, statements: list[dict[str, Any]]) -> dict[str, Any]:
        """
        Submit statements as a single transaction.

        Returns:
            The decoded response body.

        Raises:
            GraphStoreError: On a transport error, a non-200 status, a body
                that is not a JSON object, or a non-empty ``errors`` list.
        """
        try:
            resp = httpx.post(
                self.endpoint,
                content=json.dumps({"statements": statements}),
                headers=HEADERS,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise GraphStoreError(f"Request to {self.endpoint} failed: {e}") from e

        if resp.status_code != 200:
            raise GraphStoreError(
                f"Graph store returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            result = resp.json()
        except ValueError as e:
            raise GraphStoreError(
                f"Graph store returned invalid JSON: {e}",
                status_code=resp.status_code,
                body=resp.text,
            ) from e

        if not isinstance(result, dict):
            raise GraphStoreError(
                f"Graph store returned {type(result).__name__}, expected a JSON object",
                status_code=resp.status_code,
                body=resp.text,
            )

        errors = result.get("errors") or []
        if errors:
            first = errors[0]
            message = first.get("message", first) if isinstance(first, dict) else first
            raise GraphStoreError(
                f"Graph store reported {len(errors)} error(s): {message}",
                status_code=resp.status_code,
                body=resp.text,
            )
        return result


class GraphExporter:
    """Turn normalized person records into graph transactions."""

    def __init__(self, client: GraphStoreClient):
        self.client = client

    def export(self, record: PersonRecord) -> None:
        statements = build_statements(record)
        logger.debug(f"{record.orcid}: committing {len(statements)} statements")
        self.client.commit(statements)

    def clear_affiliations(self) -> None:
        """Delete every AFFILIATED_WITH edge, leaving nodes in place."""
        logger.info("Deleting existing AFFILIATED_WITH edges")
        self.client.commit([statement(DELETE_AFFILIATIONS, {})])
