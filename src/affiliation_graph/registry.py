"""
Organization identity reconciliation.

Organization names from records are mapped through an operator-supplied
alias table to a canonical name. The registry keeps the first
organization seen for each canonical name; every later reference to the
same canonical name is rewritten to that entry, so one real-world
organization becomes a single graph node even when some records carry a
disambiguated identifier and others do not.
"""

import hashlib
import json
import logging
from pathlib import Path
from typing import Iterator, Mapping, Optional

from .errors import UnresolvedOrganization
from .models import OrganizationRef, PersonRecord

logger = logging.getLogger(__name__)


def derive_org_id(name: str) -> str:
    """Stable identifier for an organization without a source identifier."""
    return hashlib.sha1(name.encode("utf-8")).hexdigest()


class AliasTable:
    """
    Read-only mapping of raw organization names to canonical names.

    Chains (``a -> b``, ``b -> c``) are followed to the end so that
    canonicalizing a canonical name returns it unchanged. Cycles are
    rejected on construction.
    """

    def __init__(self, aliases: Optional[Mapping[str, str]] = None):
        self._aliases: dict[str, str] = {}
        raw = dict(aliases or {})
        for name in raw:
            self._aliases[name] = self._follow(name, raw)

    @staticmethod
    def _follow(name: str, raw: Mapping[str, str]) -> str:
        seen = {name}
        current = raw[name]
        while current in raw and raw[current] != current:
            if current in seen:
                raise ValueError(f"Alias cycle involving {name!r}")
            seen.add(current)
            current = raw[current]
        return current

    @classmethod
    def load(cls, path: Optional[str | Path]) -> "AliasTable":
        """Load a JSON object of ``{"raw name": "canonical name"}``. No path means no aliases."""
        if path is None:
            return cls()
        path = Path(path)
        if not path.exists():
            logger.warning(f"Alias table {path} not found, using raw organization names")
            return cls()
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            raise ValueError(f"Alias table {path} must be a JSON object of strings")
        logger.info(f"Loaded {len(data)} organization aliases from {path}")
        return cls(data)

    def canonical(self, name: str) -> str:
        return self._aliases.get(name, name)

    def __len__(self) -> int:
        return len(self._aliases)


class OrganizationRegistry:
    """First-seen organization per canonical name, filled by the warm-up pass."""

    def __init__(self, aliases: Optional[AliasTable] = None):
        self.aliases = aliases or AliasTable()
        self._orgs: dict[str, OrganizationRef] = {}

    def warm_up(self, record: PersonRecord) -> None:
        """Register every organization of ``record`` not seen before."""
        for employment in record.employments:
            org = employment.organization
            name = self.aliases.canonical(org.name)
            if name in self._orgs:
                existing = self._orgs[name]
                if org.org_id and org.org_id != existing.org_id:
                    logger.debug(
                        f"{record.orcid}: keeping org_id {existing.org_id} for {name!r}, ignoring {org.org_id}"
                    )
                continue
            org_id = org.org_id or derive_org_id(name)
            self._orgs[name] = OrganizationRef(name=name, org_id=org_id)

    def resolve(self, name: str) -> OrganizationRef:
        """Return the registered organization for a raw name."""
        canonical = self.aliases.canonical(name)
        try:
            return self._orgs[canonical].model_copy()
        except KeyError:
            raise UnresolvedOrganization(name, canonical) from None

    def normalize(self, record: PersonRecord) -> PersonRecord:
        """Rewrite each employment's organization in place with its registered entry."""
        for employment in record.employments:
            employment.organization = self.resolve(employment.organization.name)
        return record

    def organizations(self) -> list[OrganizationRef]:
        """Registered organizations in first-seen order."""
        return [org.model_copy() for org in self._orgs.values()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.aliases.canonical(name) in self._orgs

    def __iter__(self) -> Iterator[str]:
        return iter(self._orgs)

    def __len__(self) -> int:
        return len(self._orgs)
