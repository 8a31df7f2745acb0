"""
Tests for paginated extraction from Paysage.
"""

import pytest

from paysage2ror.paysage import PaysageClient, has_ror
from conftest import FakeResponse, structure


def paged_handler(pages):
    """Serve pages[skip // limit] as the Paysage `data` array."""
    def handler(url, params, headers):
        index = params["skip"] // params["limit"]
        data = pages[index] if index < len(pages) else []
        return FakeResponse({"data": data, "totalCount": sum(len(p) for p in pages)})
    return handler


class TestHasRor:
    def test_ror_identifier(self):
        assert has_ror(structure("a", display="A", ror="https://ror.org/0"))

    def test_other_identifiers_only(self):
        item = {"id": "a", "identifiers": [{"type": "siret", "value": "1"}, {"type": "idref", "value": "2"}]}
        assert not has_ror(item)

    def test_missing_identifiers(self):
        assert not has_ror({"id": "a"})
        assert not has_ror({"id": "a", "identifiers": None})


class TestExtract:
    """Test page walking and filtering."""

    def test_filters_and_keeps_order_across_pages(self, make_fetcher):
        pages = [
            [structure("a", "A"), structure("b", "B", ror="https://ror.org/b")],
            [structure("c", "C"), structure("d", "D")],
            [structure("e", "E", ror="https://ror.org/e")],
        ]
        fetcher, session = make_fetcher(paged_handler(pages))
        client = PaysageClient(fetcher, api_key="secret", page_size=2, page_limit=0)

        candidates = client.extract()

        assert [c.paysage_id for c in candidates] == ["a", "c", "d"]
        assert len(session.calls) == 3

    def test_stops_at_first_short_page(self, make_fetcher):
        pages = [
            [structure("a", "A"), structure("b", "B")],
            [structure("c", "C")],
            [structure("never", "Never"), structure("seen", "Seen")],
        ]
        fetcher, session = make_fetcher(paged_handler(pages))
        client = PaysageClient(fetcher, page_size=2, page_limit=0)

        candidates = client.extract()

        assert [c.paysage_id for c in candidates] == ["a", "b", "c"]
        assert len(session.calls) == 2

    def test_empty_last_page(self, make_fetcher):
        pages = [[structure("a", "A"), structure("b", "B")], []]
        fetcher, session = make_fetcher(paged_handler(pages))
        client = PaysageClient(fetcher, page_size=2)

        assert [c.paysage_id for c in client.extract()] == ["a", "b"]
        assert len(session.calls) == 2

    def test_page_limit_honored(self, make_fetcher):
        full = [structure("x", "X"), structure("y", "Y")]
        fetcher, session = make_fetcher(paged_handler([full] * 10))
        client = PaysageClient(fetcher, page_size=2, page_limit=3)

        candidates = client.extract()

        assert len(session.calls) == 3
        assert len(candidates) == 6

    def test_skip_limit_and_api_key(self, make_fetcher):
        full = [structure("x", "X")]
        fetcher, session = make_fetcher(paged_handler([full, full, []]))
        client = PaysageClient(fetcher, api_key="secret", base_url="https://paysage.test/", category="4d6le", page_size=1)

        client.extract()

        assert [call["params"] for call in session.calls] == [
            {"limit": 1, "skip": 0},
            {"limit": 1, "skip": 1},
            {"limit": 1, "skip": 2},
        ]
        assert all(call["headers"] == {"X-API-KEY": "secret"} for call in session.calls)
        assert session.calls[0]["url"] == "https://paysage.test/geographical-categories/4d6le/structures"

    def test_malformed_payload_treated_as_empty(self, make_fetcher):
        fetcher, session = make_fetcher(lambda url, params, headers: FakeResponse({"error": "nope"}))
        client = PaysageClient(fetcher, page_size=5)

        assert client.extract() == []
        assert len(session.calls) == 1

    def test_records_without_id_skipped(self, make_fetcher, quiet_logger):
        page = [{"displayName": "Ghost"}, structure("a", "A"), "garbage"]
        fetcher, _ = make_fetcher(lambda url, params, headers: FakeResponse({"data": page}))
        client = PaysageClient(fetcher, page_size=10)

        candidates = client.extract()

        assert [c.paysage_id for c in candidates] == ["a"]
        metrics = quiet_logger.get_metrics()
        assert metrics["pages_fetched"] == 1
        assert metrics["records_seen"] == 3
        assert metrics["records_skipped"] == 2

    def test_invalid_settings(self, make_fetcher):
        fetcher, _ = make_fetcher(lambda url, params, headers: FakeResponse({"data": []}))
        with pytest.raises(ValueError):
            PaysageClient(fetcher, page_size=0)
        with pytest.raises(ValueError):
            PaysageClient(fetcher, page_limit=-1)
