"""
Command line entry point.

Modes are picked by precedence: --dry-run, --remove-stopped, --verbose,
--size-limit, then the default unused-image cleanup.
"""
import argparse
import asyncio
import math
import sys
import time
from typing import Callable, List, Optional

from dockclean.core.config import Settings
from dockclean.core.logging import get_logger, setup_logging
from dockclean.domain.errors import DockCleanError, UsageError
from dockclean.domain.ports import DockerRuntime
from dockclean.services.cleanup_service import CleanupReport, CleanupService
from dockclean.services.docker_runtime import DockerSDKRuntime
from dockclean.services.eligibility import SizeUnit
from dockclean.services.reporting import render_dry_run, render_outcome_table, render_summary

logger = get_logger("dockclean.cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="dockclean",
        description="Reclaim disk space by removing unused Docker images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List unused images without deleting them
  dockclean --dry-run

  # Remove unused images, stopping at the first failure
  dockclean

  # Remove unused images with a pool of 4 workers
  dockclean --concurrent --max-workers 4

  # Remove images whose containers are all stopped, then those containers
  dockclean --remove-stopped

  # Remove unused images larger than 500 MB
  dockclean --size-limit 500 --unit MB
        """,
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List unused Docker images without deleting them",
    )
    parser.add_argument(
        "--remove-stopped",
        action="store_true",
        help="Remove images associated with stopped containers",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Report details and status for each image during cleanup",
    )
    parser.add_argument(
        "--size-limit",
        type=float,
        help="Only remove unused images strictly larger than this size (requires --unit)",
    )
    parser.add_argument(
        "--unit",
        help="Unit for --size-limit: B, KB, MB or GB (1024-based)",
    )
    parser.add_argument(
        "--concurrent",
        action="store_true",
        help="Remove unused images concurrently",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        help="Maximum number of concurrent removals (default: from config)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from config)",
    )
    return parser.parse_args(argv)


def validate_arguments(args: argparse.Namespace) -> None:
    """Reject bad option combinations before touching the runtime."""
    if args.size_limit is not None:
        SizeUnit.parse(args.unit)
        if not math.isfinite(args.size_limit) or args.size_limit < 0:
            raise UsageError(f"Size limit must be a finite, non-negative number, got {args.size_limit}")
    elif args.unit is not None:
        raise UsageError("--unit is only valid together with --size-limit")
    if args.max_workers is not None and args.max_workers < 1:
        raise UsageError("--max-workers must be at least 1")


async def run_mode(service: CleanupService, args: argparse.Namespace) -> int:
    if args.dry_run:
        report = await service.dry_run()
        print(render_dry_run(report.candidates))
        return EXIT_OK

    if args.remove_stopped:
        report = await service.cleanup_stopped()
        _print_summary(report)
        return EXIT_OK

    if args.verbose:
        report = await service.verbose_cleanup()
        if report.candidates:
            print(render_outcome_table(report.candidates, report.result))
        _print_summary(report)
        return EXIT_OK

    if args.size_limit is not None:
        report = await service.remove_exceeding_size(args.size_limit, args.unit)
        _print_summary(report)
        return EXIT_OK

    report = await service.remove_unused(concurrent=args.concurrent)
    _print_summary(report)
    # sequential default path aborts on the first failure
    return EXIT_FAILURE if report.result.aborted else EXIT_OK


def _print_summary(report: CleanupReport) -> None:
    if report.result.outcomes:
        print(render_summary(report.result))


def main(
    argv: Optional[List[str]] = None,
    runtime_factory: Callable[[Settings], DockerRuntime] = DockerSDKRuntime.connect,
) -> int:
    args = parse_arguments(argv)
    settings = Settings()
    setup_logging(args.log_level or settings.LOG_LEVEL)

    try:
        validate_arguments(args)
    except UsageError as e:
        print(f"dockclean: error: {e}", file=sys.stderr)
        return EXIT_USAGE

    start = time.perf_counter()
    try:
        docker_runtime = runtime_factory(settings)
        service = CleanupService(docker_runtime, settings, max_workers=args.max_workers)
        status = asyncio.run(run_mode(service, args))
    except DockCleanError as e:
        logger.error("%s", e)
        return EXIT_FAILURE
    logger.info("Execution time: %.2fs", time.perf_counter() - start)
    return status


if __name__ == "__main__":
    sys.exit(main())
