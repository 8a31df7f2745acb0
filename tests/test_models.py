"""
Tests for candidate model and name handling.
"""

import pytest

from paysage2ror.models import Candidate, RorMatch, ReconciliationResult, deduplicate_names
from paysage2ror.paysage import structure_names, to_candidate
from conftest import structure


class TestNames:
    """Test name variant building."""

    def test_duplicates_removed_order_kept(self):
        """displayName=A, officialName=A, usualName=B gives [A, B]."""
        names = structure_names(structure("x1", display="A", official="A", usual="B"))
        assert names == ["A", "B"]

    def test_absent_values_filtered(self):
        names = structure_names(structure("x1", display="Université de Lille", official=None, usual=""))
        assert names == ["Université de Lille"]

    def test_no_current_name(self):
        names = structure_names({"id": "x1", "displayName": "Inria"})
        assert names == ["Inria"]

    def test_all_names_missing(self):
        assert structure_names({"id": "x1"}) == []

    def test_deduplicate_ignores_non_strings(self):
        assert deduplicate_names(["A", None, 3, "  ", "B", "A"]) == ["A", "B"]


class TestCandidate:
    """Test candidate construction and resolution state."""

    def test_url_derived_from_id(self):
        candidate = Candidate(paysage_id="aBc12")
        assert candidate.paysage_url == (
            "https://paysage.enseignementsup-recherche.gouv.fr/structures/aBc12/presentation"
        )

    def test_to_candidate_requires_id(self):
        assert to_candidate({"displayName": "No id"}) is None

    def test_to_candidate(self):
        candidate = to_candidate(structure("y7Tz9", display="CNRS", official="Centre national de la recherche scientifique"))
        assert candidate.paysage_id == "y7Tz9"
        assert candidate.paysage_names == ["CNRS", "Centre national de la recherche scientifique"]
        assert candidate.ror is None
        assert candidate.ror_name is None

    def test_apply_match_sets_both_fields(self):
        candidate = Candidate(paysage_id="a", paysage_names=["A"])
        candidate.apply_match(RorMatch(ror="https://ror.org/02feahw73", name="CNRS"))
        assert candidate.is_matched
        assert candidate.ror == "https://ror.org/02feahw73"
        assert candidate.ror_name == "CNRS"

    def test_apply_match_only_once(self):
        candidate = Candidate(paysage_id="a", paysage_names=["A"])
        candidate.apply_match(RorMatch(ror="https://ror.org/1"))
        with pytest.raises(ValueError):
            candidate.apply_match(RorMatch(ror="https://ror.org/2"))
        assert candidate.ror == "https://ror.org/1"

    def test_result_total(self):
        result = ReconciliationResult(matched=[Candidate("a")], unmatched=[Candidate("b"), Candidate("c")])
        assert result.total == 3
