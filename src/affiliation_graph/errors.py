"""Exceptions raised while importing affiliation records."""

from typing import Optional


class AffiliationGraphError(Exception):
    """Base class for all affiliation-graph errors."""


class MissingRecord(AffiliationGraphError):
    """No record exists for an identifier in the data directory or archive."""

    def __init__(self, identifier: str):
        super().__init__(f"No record found for {identifier}")
        self.identifier = identifier


class ExtractionFailure(AffiliationGraphError):
    """The archive extractor could not produce a member."""

    def __init__(self, member: str, diagnostic: str = ""):
        message = f"Failed to extract {member}"
        if diagnostic:
            message = f"{message}: {diagnostic}"
        super().__init__(message)
        self.member = member
        self.diagnostic = diagnostic


class MalformedRecord(AffiliationGraphError, ValueError):
    """A record document is not parsable or lacks its key structural fields."""


class UnresolvedOrganization(AffiliationGraphError, LookupError):
    """An organization name was requested before the warm-up pass saw it."""

    def __init__(self, name: str, canonical_name: str):
        super().__init__(f"Organization {name!r} (canonical {canonical_name!r}) was not seen during warm-up")
        self.name = name
        self.canonical_name = canonical_name


class GraphStoreError(AffiliationGraphError):
    """The graph store rejected a transaction or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
