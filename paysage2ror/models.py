from dataclasses import dataclass, field
from typing import Iterable, List, Optional

PAYSAGE_STRUCTURE_URL = "https://paysage.enseignementsup-recherche.gouv.fr/structures/{id}/presentation"


def deduplicate_names(names: Iterable[Optional[str]]) -> List[str]:
    """Drop empty values and duplicates while preserving order."""
    seen = set()
    result = []
    for name in names:
        if not isinstance(name, str) or not name.strip():
            continue
        if name not in seen:
            seen.add(name)
            result.append(name)
    return result


@dataclass(frozen=True)
class RorMatch:
    """Organization flagged as chosen by the RoR affiliation matcher."""

    ror: str
    name: Optional[str] = None


@dataclass
class Candidate:
    """A Paysage structure without RoR identifier, queued for resolution."""

    paysage_id: str
    paysage_names: List[str] = field(default_factory=list)
    ror: Optional[str] = None
    ror_name: Optional[str] = None

    @property
    def paysage_url(self) -> str:
        return PAYSAGE_STRUCTURE_URL.format(id=self.paysage_id)

    @property
    def is_matched(self) -> bool:
        return self.ror is not None

    def apply_match(self, match: RorMatch) -> None:
        """Record the resolved organization. A candidate is resolved once."""
        if self.ror is not None:
            raise ValueError(f"Candidate {self.paysage_id} is already resolved to {self.ror}")
        self.ror = match.ror
        self.ror_name = match.name


@dataclass
class ReconciliationResult:
    matched: List[Candidate] = field(default_factory=list)
    unmatched: List[Candidate] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.matched) + len(self.unmatched)
