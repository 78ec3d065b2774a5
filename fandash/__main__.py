"""
Fandash — Runner
─────────────────
  python -m fandash --mode once       one aggregation pass, JSON to stdout
  python -m fandash --mode refresh    drop cached categories, then one pass
  python -m fandash --mode watch      a pass every UPDATE_INTERVAL seconds
  python -m fandash --mode status     cache panel: last update + item counts
"""

import argparse
import asyncio
import json
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from . import config
from .config import Settings
from .orchestrator import AggregationOrchestrator, AggregationPass, build_summary, open_session

log = logging.getLogger("fandash.runner")


def configure_logging() -> None:
    level = logging.DEBUG if config.VERBOSE else getattr(logging, config.LOG_LEVEL, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _payload(result: AggregationPass, with_summary: bool) -> dict:
    payload = result.to_dict()
    if with_summary:
        payload["summary"] = build_summary(result)
    return payload


def _emit(payload: dict) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


async def run_once(settings: Settings, refresh: bool = False, with_summary: bool = False) -> dict:
    async with open_session(settings) as orchestrator:
        result = await (orchestrator.force_refresh() if refresh else orchestrator.run_pass())
        return _payload(result, with_summary)


async def run_watch(settings: Settings, with_summary: bool = False) -> None:
    """Long-running mode. Late merchandise results are logged as they land."""
    async with open_session(settings) as orchestrator:
        orchestrator.on_merch_update(
            lambda items: log.info(f"Merchandise updated in background: {len(items)} items"))

        async def tick(target: AggregationOrchestrator = orchestrator) -> None:
            result = await target.run_pass()
            _emit(_payload(result, with_summary))

        scheduler = AsyncIOScheduler()
        scheduler.add_job(tick, "interval", seconds=settings.update_interval, id="pass",
                          next_run_time=datetime.now(timezone.utc), max_instances=1)
        scheduler.start()
        log.info(f"Fandash watching — a pass every {settings.update_interval}s")
        try:
            await asyncio.Event().wait()
        finally:
            scheduler.shutdown(wait=False)


async def print_status(settings: Settings) -> None:
    async with open_session(settings) as orchestrator:
        rows = orchestrator.cache_status()
    print("\n══════════════════════════════════════════")
    print("  Fandash — Cache Status")
    print("══════════════════════════════════════════")
    for row in rows:
        if row["updated_ms"] is None:
            print(f"  {row['label']:<16} not cached")
            continue
        updated = datetime.fromtimestamp(row["updated_ms"] / 1000, tz=timezone.utc)
        print(f"  {row['label']:<16} {updated:%Y-%m-%d %H:%M:%S}Z  "
              f"{row['age_ms'] // 60000:>4} min old  {row['count']:>3} items")
    print("══════════════════════════════════════════\n")


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Fandash aggregation runner")
    parser.add_argument(
        "--mode",
        choices=["once", "refresh", "watch", "status"],
        default="once",
        help=(
            "once=one pass  "
            "refresh=clear cache then one pass  "
            "watch=run forever  "
            "status=print cache status"
        )
    )
    parser.add_argument("--summary", action="store_true", help="include the dashboard summary")
    parser.add_argument("--store", help="override FANDASH_STORE (memory | file:<path> | redis://...)")
    args = parser.parse_args(argv)

    configure_logging()
    settings = Settings()
    if args.store:
        settings.store_url = args.store

    if args.mode == "status":
        asyncio.run(print_status(settings))
    elif args.mode == "watch":
        try:
            asyncio.run(run_watch(settings, args.summary))
        except KeyboardInterrupt:
            log.info("Stopped")
    else:
        _emit(asyncio.run(run_once(settings, refresh=args.mode == "refresh", with_summary=args.summary)))


if __name__ == "__main__":
    main()
