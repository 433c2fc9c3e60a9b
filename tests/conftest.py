"""
Shared test fixtures for affiliation-graph.

Provides an ORCID record XML builder, an extracted summaries tree, a
zip archive with the same layout, and alias table files.
"""

import json
import logging
import zipfile
from pathlib import Path
from typing import Optional

import pytest

from affiliation_graph.source import record_path


# ---------------------------------------------------------------------------
# Logging reset (autouse) -- CLI commands reconfigure the root logger
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers installed by _configure_logging so later tests log normally."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    logging.getLogger("affiliation_graph").setLevel(logging.NOTSET)


NS_DECL = (
    'xmlns:record="http://www.orcid.org/ns/record" '
    'xmlns:common="http://www.orcid.org/ns/common" '
    'xmlns:person="http://www.orcid.org/ns/person" '
    'xmlns:personal-details="http://www.orcid.org/ns/personal-details" '
    'xmlns:activities="http://www.orcid.org/ns/activities" '
    'xmlns:employment="http://www.orcid.org/ns/employment"'
)


def _date_xml(tag: str, date: Optional[tuple]) -> str:
    if date is None:
        return ""
    parts = "".join(
        f"<common:{name}>{value}</common:{name}>"
        for name, value in zip(("year", "month", "day"), date)
    )
    return f"<common:{tag}>{parts}</common:{tag}>"


def employment_xml(
    name: str,
    org_id: str = "",
    role: str = "",
    start: Optional[tuple] = None,
    end: Optional[tuple] = None,
) -> str:
    disambiguated = ""
    if org_id:
        disambiguated = (
            "<common:disambiguated-organization>"
            f"<common:disambiguated-organization-identifier>{org_id}</common:disambiguated-organization-identifier>"
            "<common:disambiguation-source>ROR</common:disambiguation-source>"
            "</common:disambiguated-organization>"
        )
    role_xml = f"<common:role-title>{role}</common:role-title>" if role else ""
    return (
        "<employment:employment-summary>"
        f"{role_xml}{_date_xml('start-date', start)}{_date_xml('end-date', end)}"
        f"<common:organization><common:name>{name}</common:name>{disambiguated}</common:organization>"
        "</employment:employment-summary>"
    )


def record_xml(
    orcid: str,
    first_name: str = "Josiah",
    last_name: str = "Carberry",
    employments: tuple[str, ...] = (),
    grouped: bool = True,
) -> bytes:
    """Build an ORCID record summary document."""
    if grouped:
        body = "".join(f"<activities:affiliation-group>{e}</activities:affiliation-group>" for e in employments)
    else:
        body = "".join(employments)
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f"<record:record {NS_DECL}>"
        f"<common:orcid-identifier><common:uri>https://orcid.org/{orcid}</common:uri>"
        f"<common:path>{orcid}</common:path></common:orcid-identifier>"
        f"<person:person><person:name>"
        f"<personal-details:given-names>{first_name}</personal-details:given-names>"
        f"<personal-details:family-name>{last_name}</personal-details:family-name>"
        f"</person:name></person:person>"
        f"<activities:activities-summary><activities:employments>{body}</activities:employments>"
        f"</activities:activities-summary>"
        f"</record:record>"
    ).encode("utf-8")


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Empty extracted-summaries directory."""
    path = tmp_path / "summaries"
    path.mkdir()
    return path


@pytest.fixture
def write_record(data_dir: Path):
    """Factory that writes a record document into the summaries tree."""

    def _write(orcid: str, content: bytes) -> Path:
        path = data_dir / record_path(orcid)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    return _write


@pytest.fixture
def make_archive(tmp_path: Path):
    """Factory that builds a zip with records under ``summaries/<shard>/``."""

    def _make(records: dict[str, bytes], prefix: str = "summaries") -> Path:
        path = tmp_path / "summaries.zip"
        with zipfile.ZipFile(path, "w") as zf:
            for orcid, content in records.items():
                zf.writestr(f"{prefix}/{record_path(orcid)}", content)
        return path

    return _make


@pytest.fixture
def aliases_file(tmp_path: Path):
    """Factory that writes an alias table JSON file."""

    def _write(aliases: dict[str, str]) -> Path:
        path = tmp_path / "org_matches.json"
        path.write_text(json.dumps(aliases), encoding="utf-8")
        return path

    return _write
