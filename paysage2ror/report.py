"""
CSV reports of a reconciliation run.

The matched report follows the layout of a Paysage identifier import
(type, value, startDate, endDate, active) next to the data used to review
each match. Files are written atomically: a report either holds all its
rows or does not exist.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import List

import pandas as pd

from .models import Candidate
from .ror import ROR_ID_PREFIX

MATCHED_COLUMNS = [
    "paysageId",
    "paysageUrl",
    "paysageNames",
    "ror",
    "rorName",
    "type",
    "value",
    "startDate",
    "endDate",
    "active",
]
UNMATCHED_COLUMNS = ["paysageId", "paysageUrl", "paysageNames"]

IDENTIFIER_TYPE = "ror"
ACTIVE = "true"


def bare_ror_id(ror: str) -> str:
    """'https://ror.org/05dxjsc12' -> '05dxjsc12'."""
    if ror.startswith(ROR_ID_PREFIX):
        return ror[len(ROR_ID_PREFIX):]
    return ror


def serialize_names(names: List[str]) -> str:
    return json.dumps(names, ensure_ascii=False)


def matched_row(candidate: Candidate) -> dict:
    if candidate.ror is None:
        raise ValueError(f"Candidate {candidate.paysage_id} has no RoR")
    return {
        "paysageId": candidate.paysage_id,
        "paysageUrl": candidate.paysage_url,
        "paysageNames": serialize_names(candidate.paysage_names),
        "ror": candidate.ror,
        "rorName": candidate.ror_name or "",
        "type": IDENTIFIER_TYPE,
        "value": bare_ror_id(candidate.ror),
        "startDate": "",
        "endDate": "",
        "active": ACTIVE,
    }


def unmatched_row(candidate: Candidate) -> dict:
    return {
        "paysageId": candidate.paysage_id,
        "paysageUrl": candidate.paysage_url,
        "paysageNames": serialize_names(candidate.paysage_names),
    }


def _write_atomic(df: pd.DataFrame, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            df.to_csv(f, index=False)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return path


def write_matched(candidates: List[Candidate], path: Path) -> Path:
    df = pd.DataFrame([matched_row(c) for c in candidates], columns=MATCHED_COLUMNS)
    return _write_atomic(df, path)


def write_unmatched(candidates: List[Candidate], path: Path) -> Path:
    df = pd.DataFrame([unmatched_row(c) for c in candidates], columns=UNMATCHED_COLUMNS)
    return _write_atomic(df, path)
