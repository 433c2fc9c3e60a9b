"""
Parse ORCID record summaries (XML) into :class:`PersonRecord` objects.

Handles both the 3.0 message layout, where employment summaries are
wrapped in ``activities:affiliation-group`` elements, and the 2.x layout
where they sit directly under ``activities:employments``.

Optional nodes that are missing become empty strings (or None for
dates). Only a document that is not XML, is not an ORCID record, or has
no ORCID iD is rejected.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Optional

from .errors import MalformedRecord
from .models import Employment, OrganizationRef, PersonRecord

logger = logging.getLogger(__name__)

NAMESPACES = {
    "record": "http://www.orcid.org/ns/record",
    "common": "http://www.orcid.org/ns/common",
    "person": "http://www.orcid.org/ns/person",
    "personal-details": "http://www.orcid.org/ns/personal-details",
    "activities": "http://www.orcid.org/ns/activities",
    "employment": "http://www.orcid.org/ns/employment",
}

RECORD_TAG = f"{{{NAMESPACES['record']}}}record"
DATE_SEPARATOR = "-"

_EMPLOYMENTS = "activities:activities-summary/activities:employments"
_GIVEN_NAMES = "person:person/person:name/personal-details:given-names"
_FAMILY_NAME = "person:person/person:name/personal-details:family-name"
_ORG_NAME = "common:organization/common:name"
_ORG_ID = (
    "common:organization/common:disambiguated-organization/"
    "common:disambiguated-organization-identifier"
)


def _text(element: ET.Element, path: str) -> str:
    return (element.findtext(path, default="", namespaces=NAMESPACES) or "").strip()


def to_date(element: Optional[ET.Element]) -> Optional[str]:
    """
    Join the components of a partial date element with hyphens.

    ``<start-date><year>2019</year><month>04</month></start-date>`` gives
    ``"2019-04"``. Components after the first empty one are dropped, so a
    day without a month never lands in the month position. A missing
    element, or one without any components, gives None.
    """
    if element is None:
        return None
    parts = []
    for child in element:
        text = (child.text or "").strip()
        if not text:
            break
        parts.append(text)
    return DATE_SEPARATOR.join(parts) or None


def _orcid_for(root: ET.Element) -> str:
    uri = _text(root, "common:orcid-identifier/common:uri")
    if uri:
        return uri.rstrip("/").split("/")[-1]
    return _text(root, "common:orcid-identifier/common:path")


def _employment_summaries(root: ET.Element) -> list[ET.Element]:
    employments = root.find(_EMPLOYMENTS, NAMESPACES)
    if employments is None:
        return []

    summaries = []
    for child in employments:
        if child.tag == f"{{{NAMESPACES['activities']}}}affiliation-group":
            # Several summaries in one group are the same employment from different sources
            summary = child.find("employment:employment-summary", NAMESPACES)
            if summary is not None:
                summaries.append(summary)
        elif child.tag == f"{{{NAMESPACES['employment']}}}employment-summary":
            summaries.append(child)
    return summaries


def _employment_for(summary: ET.Element) -> Employment:
    return Employment(
        organization=OrganizationRef(
            name=_text(summary, _ORG_NAME),
            org_id=_text(summary, _ORG_ID),
        ),
        role=_text(summary, "common:role-title"),
        start=to_date(summary.find("common:start-date", NAMESPACES)),
        end=to_date(summary.find("common:end-date", NAMESPACES)),
    )


def parse(raw: bytes | str) -> PersonRecord:
    """Parse one ORCID record document."""
    try:
        root = ET.fromstring(raw)
    except ET.ParseError as e:
        raise MalformedRecord(f"Record is not well-formed XML: {e}") from e

    if root.tag != RECORD_TAG:
        raise MalformedRecord(f"Expected a record:record root element, got {root.tag}")

    orcid = _orcid_for(root)
    if not orcid:
        raise MalformedRecord("Record has no ORCID identifier")

    employments = [_employment_for(s) for s in _employment_summaries(root)]
    logger.debug(f"Parsed {orcid} with {len(employments)} employments")

    return PersonRecord(
        orcid=orcid,
        first_name=_text(root, _GIVEN_NAMES),
        last_name=_text(root, _FAMILY_NAME),
        employments=employments,
    )


class RecordParser:
    """Callable wrapper around :func:`parse` for wiring into the pipeline."""

    def parse(self, raw: bytes | str) -> PersonRecord:
        return parse(raw)
