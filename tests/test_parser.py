"""Tests for affiliation_graph.parser."""

import xml.etree.ElementTree as ET

import pytest

from affiliation_graph.errors import MalformedRecord
from affiliation_graph.parser import parse, to_date
from conftest import NS_DECL, employment_xml, record_xml


ORCID = "0000-0002-1825-0097"


def _date(xml: str) -> ET.Element:
    return ET.fromstring(f'<common:start-date {NS_DECL}>{xml}</common:start-date>')


# ---------------------------------------------------------------------------
# Partial dates
# ---------------------------------------------------------------------------


class TestToDate:
    def test_year_only(self):
        assert to_date(_date("<common:year>2019</common:year>")) == "2019"

    def test_year_month(self):
        assert to_date(_date("<common:year>2019</common:year><common:month>04</common:month>")) == "2019-04"

    def test_full_date(self):
        xml = "<common:year>2019</common:year><common:month>04</common:month><common:day>01</common:day>"
        assert to_date(_date(xml)) == "2019-04-01"

    def test_no_components(self):
        assert to_date(_date("")) is None

    def test_missing_element(self):
        assert to_date(None) is None

    def test_trailing_empty_component(self):
        assert to_date(_date("<common:year>2019</common:year><common:month/>")) == "2019"

    def test_day_after_empty_month_dropped(self):
        xml = "<common:year>2019</common:year><common:month/><common:day>05</common:day>"
        assert to_date(_date(xml)) == "2019"

    def test_empty_year(self):
        assert to_date(_date("<common:year/><common:month>04</common:month>")) is None


# ---------------------------------------------------------------------------
# Identity fields
# ---------------------------------------------------------------------------


class TestIdentity:
    def test_orcid_from_uri(self):
        record = parse(record_xml(ORCID))
        assert record.orcid == ORCID

    def test_names(self):
        record = parse(record_xml(ORCID, first_name="Ada", last_name="Lovelace"))
        assert record.first_name == "Ada"
        assert record.last_name == "Lovelace"

    def test_missing_names_are_empty(self):
        raw = record_xml(ORCID).replace(
            b"<personal-details:family-name>Carberry</personal-details:family-name>", b""
        )
        record = parse(raw)
        assert record.last_name == ""
        assert record.first_name == "Josiah"

    def test_orcid_from_path_when_no_uri(self):
        raw = record_xml(ORCID).replace(f"<common:uri>https://orcid.org/{ORCID}</common:uri>".encode(), b"")
        assert parse(raw).orcid == ORCID

    def test_accepts_str(self):
        assert parse(record_xml(ORCID).decode("utf-8")).orcid == ORCID


# ---------------------------------------------------------------------------
# Employments
# ---------------------------------------------------------------------------


class TestEmployments:
    def test_fields(self):
        raw = record_xml(ORCID, employments=(
            employment_xml("Brown University", org_id="ROR123", role="Professor", start=(2010, "09"), end=(2015,)),
        ))
        record = parse(raw)
        assert len(record.employments) == 1
        e = record.employments[0]
        assert e.organization.name == "Brown University"
        assert e.organization.org_id == "ROR123"
        assert e.role == "Professor"
        assert e.start == "2010-09"
        assert e.end == "2015"

    def test_missing_optional_fields(self):
        record = parse(record_xml(ORCID, employments=(employment_xml("MIT"),)))
        e = record.employments[0]
        assert e.organization.org_id == ""
        assert e.role == ""
        assert e.start is None
        assert e.end is None

    def test_document_order_preserved(self):
        names = ["Zeta Institute", "Alpha College", "Mid University"]
        record = parse(record_xml(ORCID, employments=tuple(employment_xml(n) for n in names)))
        assert [e.organization.name for e in record.employments] == names

    def test_ungrouped_layout(self):
        raw = record_xml(ORCID, employments=(employment_xml("MIT"), employment_xml("CERN")), grouped=False)
        record = parse(raw)
        assert [e.organization.name for e in record.employments] == ["MIT", "CERN"]

    def test_first_summary_of_group_used(self):
        group = employment_xml("MIT", role="Postdoc") + employment_xml("MIT", role="Research Scientist")
        record = parse(record_xml(ORCID, employments=(group,)))
        assert len(record.employments) == 1
        assert record.employments[0].role == "Postdoc"

    def test_no_activities(self):
        raw = (
            f'<record:record {NS_DECL}>'
            f"<common:orcid-identifier><common:path>{ORCID}</common:path></common:orcid-identifier>"
            "</record:record>"
        ).encode()
        record = parse(raw)
        assert record.employments == []
        assert record.first_name == ""


# ---------------------------------------------------------------------------
# Malformed documents
# ---------------------------------------------------------------------------


class TestMalformed:
    def test_not_xml(self):
        with pytest.raises(MalformedRecord):
            parse(b"<record:record")

    def test_wrong_root(self):
        with pytest.raises(MalformedRecord):
            parse(b"<html><body/></html>")

    def test_missing_orcid(self):
        raw = f'<record:record {NS_DECL}><person:person/></record:record>'.encode()
        with pytest.raises(MalformedRecord):
            parse(raw)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            parse(b"")
