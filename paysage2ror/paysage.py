"""
Extraction of Paysage structures lacking a RoR identifier.

Structures are read page by page from a geographical category with
skip/limit pagination. Pages are fetched sequentially: whether a next
page exists is only known once the current one has been read.
"""

from typing import Any, Dict, List, Optional, Tuple

from .http import JsonFetcher
from .logger import get_logger
from .models import Candidate, deduplicate_names

ROR_IDENTIFIER_TYPE = "ror"


def has_ror(structure: Dict[str, Any]) -> bool:
    """True if the structure already carries at least one RoR identifier."""
    identifiers = structure.get("identifiers") or []
    return any(
        isinstance(identifier, dict) and identifier.get("type") == ROR_IDENTIFIER_TYPE
        for identifier in identifiers
    )


def structure_names(structure: Dict[str, Any]) -> List[str]:
    current_name = structure.get("currentName") or {}
    if not isinstance(current_name, dict):
        current_name = {}
    return deduplicate_names([
        structure.get("displayName"),
        current_name.get("officialName"),
        current_name.get("usualName"),
    ])


def to_candidate(structure: Dict[str, Any]) -> Optional[Candidate]:
    """Build a candidate from a raw structure; None when it has no id."""
    paysage_id = structure.get("id")
    if not paysage_id:
        return None
    return Candidate(paysage_id=str(paysage_id), paysage_names=structure_names(structure))


class PaysageClient:
    """Reads structures of one geographical category from the Paysage API."""

    def __init__(
        self,
        fetcher: JsonFetcher,
        api_key: str = "",
        base_url: str = "https://api.paysage.dataesr.ovh",
        category: str = "4d6le",
        page_size: int = 200,
        page_limit: int = 0,
    ):
        """
        Args:
            fetcher: HTTP layer used for every page request
            api_key: Paysage credential, sent as X-API-KEY
            base_url: Paysage API root
            category: Geographical category id to extract
            page_size: Number of structures per page
            page_limit: Maximum number of pages to fetch (0 = no limit)
        """
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        if page_limit < 0:
            raise ValueError("page_limit must be >= 0")
        self.fetcher = fetcher
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.category = category
        self.page_size = page_size
        self.page_limit = page_limit
        self.logger = get_logger()

    @property
    def structures_url(self) -> str:
        return f"{self.base_url}/geographical-categories/{self.category}/structures"

    def fetch_page(self, page: int) -> List[Dict[str, Any]]:
        """Return the raw structures of a 1-based page."""
        skip = (page - 1) * self.page_size
        data = self.fetcher.get_json(
            self.structures_url,
            params={"limit": self.page_size, "skip": skip},
            headers={"X-API-KEY": self.api_key},
        )
        items = data.get("data") if isinstance(data, dict) else None
        return items if isinstance(items, list) else []

    def _page_candidates(self, items: List[Dict[str, Any]]) -> Tuple[List[Candidate], int]:
        candidates = []
        skipped = 0
        for structure in items:
            if not isinstance(structure, dict) or has_ror(structure):
                skipped += 1
                continue
            candidate = to_candidate(structure)
            if candidate is None:
                self.logger.warning("Skipping Paysage structure without id", structure=structure.get("displayName"))
                skipped += 1
                continue
            candidates.append(candidate)
        return candidates, skipped

    def extract(self) -> List[Candidate]:
        """
        Collect every structure of the category that has no RoR identifier.

        Stops at the first short page, or once page_limit pages were read.
        """
        candidates: List[Candidate] = []
        page = 1
        while True:
            self.logger.info(f"Page {page} of Paysage")
            items = self.fetch_page(page)
            page_candidates, skipped = self._page_candidates(items)
            candidates.extend(page_candidates)
            self.logger.record_page(len(items), skipped)
            self.logger.debug(
                "Paysage page read",
                page=page, items=len(items), candidates=len(page_candidates),
            )

            if len(items) < self.page_size:
                break
            if self.page_limit and page >= self.page_limit:
                self.logger.info(f"Page limit reached ({self.page_limit})")
                break
            page += 1

        return candidates
