from dataclasses import dataclass, field
from typing import List, Optional

from dockclean.core.config import Settings
from dockclean.core.logging import get_logger
from dockclean.domain.image import Image
from dockclean.domain.outcome import RunResult
from dockclean.domain.ports import DockerRuntime
from dockclean.services.classifier import Classification, classify
from dockclean.services.eligibility import (
    SizeUnit,
    select_exceeding_size,
    select_unused,
    to_bytes,
)
from dockclean.services.orchestrator import RemovalOrchestrator, targets_for
from dockclean.services.reporting import format_size

logger = get_logger(__name__)


@dataclass
class CleanupReport:
    """What a verb looked at and what happened to it."""
    mode: str
    candidates: List[Image] = field(default_factory=list)
    result: RunResult = field(default_factory=RunResult)
    classification: Optional[Classification] = None


class CleanupService:
    """Umbrella service behind both the CLI and the HTTP API."""

    def __init__(self, docker_runtime: DockerRuntime, settings: Optional[Settings] = None, max_workers: Optional[int] = None):
        self.settings = settings or Settings()
        self.docker_runtime = docker_runtime
        self.orchestrator = RemovalOrchestrator(
            docker_runtime,
            force=self.settings.FORCE_REMOVE,
            max_workers=max_workers or self.settings.MAX_CONCURRENT_REMOVALS,
        )

    # ------------------------------- Inventory -------------------------------
    async def list_unused(self) -> List[Image]:
        images = await self.docker_runtime.list_images(include_all=True)
        unused = select_unused(images)
        if unused:
            logger.info("Found %d unused images", len(unused))
        return unused

    # ------------------------------- Verbs -------------------------------
    async def dry_run(self) -> CleanupReport:
        return CleanupReport(mode="dry-run", candidates=await self.list_unused())

    async def remove_unused(self, concurrent: bool = False) -> CleanupReport:
        """Default verb. Sequential mode stops at the first failed removal."""
        unused = await self.list_unused()
        if not unused:
            logger.info("No unused images found")
            return CleanupReport(mode="unused", candidates=unused)

        if concurrent:
            result = await self.orchestrator.remove_concurrent(unused)
        else:
            result = await self.orchestrator.remove_sequential(unused, stop_on_failure=True)

        if result.error:
            logger.error("Error removing the docker images: %s", result.error)
        else:
            logger.info("Successfully removed all the docker images")
        return CleanupReport(mode="unused", candidates=unused, result=result)

    async def verbose_cleanup(self) -> CleanupReport:
        """Removes every unused image, reporting each outcome independently."""
        unused = await self.list_unused()
        if not unused:
            logger.info("No unused images found")
            return CleanupReport(mode="verbose", candidates=unused)

        logger.info("Found %d unused images. Starting removal in verbose mode...", len(unused))
        result = await self.orchestrator.remove_sequential(unused, stop_on_failure=False)
        return CleanupReport(mode="verbose", candidates=unused, result=result)

    async def remove_exceeding_size(self, size_limit: float, unit: str | SizeUnit) -> CleanupReport:
        """Removes unused images strictly larger than size_limit."""
        threshold = to_bytes(size_limit, unit)

        unused = await self.list_unused()
        if not unused:
            logger.info("No unused images found")
            return CleanupReport(mode="size-limit", candidates=unused)

        targets = select_exceeding_size(unused, threshold)
        result = await self.orchestrator.remove_sequential(targets, stop_on_failure=False)

        removed = result.succeeded()
        if removed > 0:
            logger.info(
                "Summary: Removed %d images (Total space freed: %s)",
                removed, format_size(result.reclaimed_bytes),
            )
        elif not targets:
            logger.info("No unused images are exceeding the limit %s", format_size(threshold))
        return CleanupReport(mode="size-limit", candidates=targets, result=result)

    async def cleanup_stopped(self) -> CleanupReport:
        """Removes images whose containers are all exited, then those containers."""
        images = await self.docker_runtime.list_images(include_all=False)
        containers = await self.docker_runtime.list_containers(include_all=True)

        classification = classify(images, containers)
        targets = targets_for(images, classification.removable())
        if not targets:
            logger.info("No images found whose containers are all stopped")
            return CleanupReport(mode="remove-stopped", classification=classification)

        logger.info("Found %d images used only by stopped containers", len(targets))
        result = await self.orchestrator.remove_with_cascade(targets, classification)
        return CleanupReport(
            mode="remove-stopped",
            candidates=targets,
            result=result,
            classification=classification,
        )
