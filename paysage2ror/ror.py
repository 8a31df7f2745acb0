"""Client for the RoR affiliation matcher."""

from typing import Any, Dict, List, Optional

from .http import JsonFetcher
from .models import RorMatch

ROR_ID_PREFIX = "https://ror.org/"


def first_chosen(items: List[Any]) -> Optional[RorMatch]:
    """
    Return the first item flagged ``chosen`` by RoR.

    Items without an organization id are ignored: a match must carry an
    identifier to be usable.
    """
    for item in items:
        if not isinstance(item, dict) or not item.get("chosen"):
            continue
        organization = item.get("organization") or {}
        if not isinstance(organization, dict):
            continue
        ror_id = organization.get("id")
        if ror_id:
            return RorMatch(ror=str(ror_id), name=organization.get("name"))
    return None


class RorClient:
    """Asks RoR which organization it would pick for an affiliation string."""

    def __init__(self, fetcher: JsonFetcher, api_url: str = "https://api.ror.org/organizations"):
        self.fetcher = fetcher
        self.api_url = api_url

    def search_affiliation(self, affiliation: str) -> List[Dict[str, Any]]:
        """Raw match items for an affiliation string (URL-encoded by requests)."""
        data = self.fetcher.get_json(self.api_url, params={"affiliation": affiliation})
        items = data.get("items") if isinstance(data, dict) else None
        return items if isinstance(items, list) else []

    def find_chosen(self, affiliation: str) -> Optional[RorMatch]:
        return first_chosen(self.search_affiliation(affiliation))
