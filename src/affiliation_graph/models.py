"""Pydantic models for person records and their employments."""

from typing import Optional

from pydantic import BaseModel, Field


class OrganizationRef(BaseModel):
    """An organization as named in a record, plus its disambiguated identifier."""

    name: str
    org_id: str = ""

    def model_dump_for_graph(self) -> dict[str, str]:
        return {"org_id": self.org_id, "name": self.name}


class Employment(BaseModel):
    """One employment entry of a person, dates kept as partial ISO strings."""

    organization: OrganizationRef
    role: str = ""
    start: Optional[str] = None
    end: Optional[str] = None


class PersonRecord(BaseModel):
    """A researcher and their employments in document order."""

    orcid: str = Field(min_length=1)
    first_name: str = ""
    last_name: str = ""
    employments: list[Employment] = Field(default_factory=list)

    def model_dump_for_graph(self) -> dict[str, str]:
        """Return the person key used by graph statements."""
        return {
            "orcid": self.orcid,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }
