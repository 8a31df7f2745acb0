import argparse
from typing import Optional, Sequence

from . import __version__
from .config import ConfigError, Settings
from .env import load_env
from .http import FetchError, JsonFetcher
from .logger import get_logger, reset_logger
from .paysage import PaysageClient
from .ratelimit import RateLimiter
from .reconcile import run_reconciliation
from .report import write_matched, write_unmatched
from .resolver import Resolver
from .ror import RorClient


def build_fetcher(source: str, settings: Settings) -> JsonFetcher:
    return JsonFetcher(
        source,
        timeout=settings.http_timeout,
        max_retries=settings.retry_max,
        base_delay=settings.retry_base_delay,
        max_delay=settings.retry_max_delay,
    )


def run(settings: Settings, paysage: PaysageClient, resolver: Resolver) -> dict:
    """Reconcile and write the reports. Returns the paths written."""
    logger = get_logger()
    result = run_reconciliation(paysage, resolver)

    logger.info("03 _ Write results in CSV")
    written = {"matched": write_matched(result.matched, settings.matched_path)}
    logger.info(f"{len(result.matched)} matched structures written", path=str(written["matched"]))

    if settings.keep_unmatched:
        written["unmatched"] = write_unmatched(result.unmatched, settings.unmatched_path)
        logger.info(f"{len(result.unmatched)} unmatched structures written", path=str(written["unmatched"]))
    else:
        logger.info(f"{len(result.unmatched)} unmatched structures dropped (UNMATCHED_REPORT=drop)")
    return written


def main(argv: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(
        prog="paysage2ror",
        description="Find RoR identifiers for Paysage structures that lack one. Configured through environment variables.",
    )
    parser.add_argument("--version", action="store_true", help="Show version")
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    # Load .env if present (PAYSAGE_API_KEY, page settings, delays...)
    load_env()
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        raise SystemExit(f"Invalid configuration: {e}") from e

    reset_logger()
    logger = get_logger(level=settings.log_level)
    if not settings.paysage_api_key:
        logger.warning("PAYSAGE_API_KEY is not set, Paysage may reject requests")

    paysage = PaysageClient(
        build_fetcher("Paysage", settings),
        api_key=settings.paysage_api_key,
        base_url=settings.paysage_api_url,
        category=settings.paysage_category,
        page_size=settings.page_size,
        page_limit=settings.page_limit,
    )
    ror = RorClient(build_fetcher("RoR", settings), api_url=settings.ror_api_url)
    resolver = Resolver(
        ror.find_chosen,
        limiter=RateLimiter(settings.lookup_delay),
        max_workers=settings.max_workers,
    )

    try:
        run(settings, paysage, resolver)
    except FetchError as e:
        logger.critical(f"Reconciliation aborted: {e}")
        logger.log_metrics_summary()
        raise SystemExit(1) from e

    logger.log_metrics_summary()
    logger.info("Done !")


if __name__ == "__main__":
    main()
