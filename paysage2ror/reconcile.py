"""
Reconciliation pipeline: extract, resolve, partition.

Stages run strictly one after the other. A FetchError raised by any of
them aborts the run before anything depending on it is written.
"""

from typing import Iterable

from .logger import get_logger
from .models import Candidate, ReconciliationResult
from .paysage import PaysageClient
from .resolver import Resolver


def partition(candidates: Iterable[Candidate]) -> ReconciliationResult:
    """Split candidates on whether they got a RoR, keeping relative order."""
    result = ReconciliationResult()
    for candidate in candidates:
        if candidate.is_matched:
            result.matched.append(candidate)
        else:
            result.unmatched.append(candidate)
    return result


def run_reconciliation(paysage: PaysageClient, resolver: Resolver) -> ReconciliationResult:
    logger = get_logger()

    logger.info("01 _ Collect structures from Paysage")
    candidates = paysage.extract()
    logger.info(f"{len(candidates)} structures without RoR")

    logger.info("02 _ For structures, guess RoR from RoR API")
    resolved = resolver.resolve_all(candidates)

    result = partition(resolved)
    logger.info(
        "Reconciliation done",
        processed=result.total, matched=len(result.matched), unmatched=len(result.unmatched),
    )
    return result
