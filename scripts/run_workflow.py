"""CLI runner and scheduler for the briefing workflow.

Usage:
    python scripts/run_workflow.py run
    python scripts/run_workflow.py run --dry-run
    python scripts/run_workflow.py schedule
"""

from __future__ import annotations

import argparse
import sys

from briefing.core.config import get_config
from briefing.core.logger import get_logger, setup_logging
from briefing.core.models import Article
from briefing.storage import ArticleStore
from briefing.workflows import BriefingWorkflow, WorkflowResult

logger = get_logger(__name__)


class _DryRunStore(ArticleStore):
    """Reads the working set but never writes it (``--dry-run``)."""

    def save(self, clusters: list[Article]) -> None:
        logger.info("dry_run_skip_save", clusters=len(clusters))


def _print_result(result: WorkflowResult) -> None:
    """Print workflow result summary to stdout."""
    status = "SUCCESS" if result.success else "FAILED"
    print(f"\n{'=' * 60}")
    print(f"  Workflow: {result.workflow_name} ({result.run_id})")
    print(f"  Status:   {status}")
    print(f"  Elapsed:  {result.elapsed_sec}s")
    print(f"  Items:    {result.items_collected}")
    print(f"  Enriched: {result.articles_enriched}")
    print(f"  Clusters: {result.clusters}")
    if result.errors:
        print(f"  Errors:   {len(result.errors)}")
        for err in result.errors:
            print(f"    - [{err.get('step', '?')}] {err.get('error', '?')}")
    for key, value in result.data.get("run_log", {}).items():
        print(f"  {key}: {value}")
    print(f"{'=' * 60}\n")


def run_briefing(dry_run: bool = False) -> WorkflowResult:
    """Run one briefing pass.

    Args:
        dry_run: Do everything except writing the working set.

    Returns:
        WorkflowResult.
    """
    config = get_config()
    store_cls = _DryRunStore if dry_run else ArticleStore
    workflow = BriefingWorkflow(config, store=store_cls(config.data_path))
    return workflow.run()


def start_scheduler() -> None:
    """Start the APScheduler daemon running a pass every N minutes.

    Runs until interrupted (Ctrl+C).
    """
    from apscheduler.schedulers.blocking import BlockingScheduler
    from apscheduler.triggers.interval import IntervalTrigger

    config = get_config()
    tz = config.schedule.timezone
    minutes = config.schedule.interval_minutes

    scheduler = BlockingScheduler(timezone=tz)
    scheduler.add_job(
        run_briefing,
        IntervalTrigger(minutes=minutes, timezone=tz),
        id="briefing",
        name="Briefing",
        max_instances=1,
        coalesce=True,
        misfire_grace_time=300,
    )
    logger.info("job_scheduled", job="briefing", interval_minutes=minutes)

    print(f"\nScheduler started (timezone: {tz}, every {minutes} min)")
    print("\nPress Ctrl+C to stop.\n")

    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("scheduler_stopped")
        print("\nScheduler stopped.")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Daily Briefing: news dedup and clustering runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python scripts/run_workflow.py run\n"
            "  python scripts/run_workflow.py run --dry-run\n"
            "  python scripts/run_workflow.py schedule\n"
        ),
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    run_parser = subparsers.add_parser("run", help="Run one briefing pass now")
    run_parser.add_argument(
        "--dry-run", action="store_true",
        help="Do not write the working set",
    )

    subparsers.add_parser("schedule", help="Start the scheduler daemon")
    return parser


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = get_config()
    setup_logging(
        level=config.logging.level,
        format=config.logging.format,
        log_file=config.log_path,
    )

    if args.command == "schedule":
        start_scheduler()
        return

    result = run_briefing(dry_run=args.dry_run)
    _print_result(result)
    sys.exit(0 if result.success else 1)


if __name__ == "__main__":
    main()
