"""
Name-ordered resolution of candidates against RoR.

Invariant: for a fixed remote state, a candidate always resolves to the
same organization. The first name whose lookup returns a chosen match
wins; RoR does the ranking.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from .logger import get_logger
from .models import Candidate, RorMatch
from .ratelimit import NoOpLimiter

Lookup = Callable[[str], Optional[RorMatch]]


class Resolver:
    """Tries each name of a candidate, in order, until RoR picks an organization."""

    def __init__(self, lookup: Lookup, limiter=None, max_workers: int = 1):
        """
        Args:
            lookup: Function returning the chosen match for an affiliation, or None
            limiter: Object with an ``acquire()`` method called before each lookup
            max_workers: Number of candidates resolved concurrently
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.lookup = lookup
        self.limiter = limiter or NoOpLimiter()
        self.max_workers = max_workers
        self.logger = get_logger()

    def find_match(self, names: List[str]) -> Optional[RorMatch]:
        for name in names:
            self.limiter.acquire()
            self.logger.record_lookup()
            match = self.lookup(name)
            if match is not None:
                return match
        return None

    def resolve(self, candidate: Candidate) -> Candidate:
        """Set ``ror``/``ror_name`` on the candidate if one of its names matches."""
        if candidate.is_matched:
            return candidate

        match = self.find_match(candidate.paysage_names)
        if match is not None:
            candidate.apply_match(match)
            self.logger.debug("RoR found", paysage_id=candidate.paysage_id, ror=match.ror)
        else:
            self.logger.debug("No RoR found", paysage_id=candidate.paysage_id)
        self.logger.record_resolution(match is not None)
        return candidate

    def resolve_all(self, candidates: List[Candidate]) -> List[Candidate]:
        """Resolve every candidate; the result keeps the input order."""
        total = len(candidates)
        if self.max_workers == 1 or total < 2:
            resolved = []
            for index, candidate in enumerate(candidates, start=1):
                resolved.append(self.resolve(candidate))
                if index % 50 == 0:
                    self.logger.info(f"Resolved {index}/{total} structures")
            return resolved

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            # map() yields in submission order, whatever the completion order
            return list(executor.map(self.resolve, candidates))
