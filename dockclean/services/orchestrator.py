import asyncio
from typing import List, Sequence

from dockclean.core.logging import get_logger
from dockclean.domain.errors import RuntimeOperationError
from dockclean.domain.image import Image
from dockclean.domain.outcome import (
    CONTAINER,
    IMAGE,
    OutcomeStatus,
    RemovalOutcome,
    RunResult,
)
from dockclean.domain.ports import DockerRuntime
from dockclean.services.classifier import Classification

logger = get_logger(__name__)


class RemovalOrchestrator:
    """Executes image (and cascaded container) removals against a runtime."""

    def __init__(self, docker_runtime: DockerRuntime, *, force: bool = True, max_workers: int = 8):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.docker_runtime = docker_runtime
        self.force = force
        self.max_workers = max_workers

    # -------------------------------
    # Single items
    # -------------------------------
    async def remove_image(self, image: Image) -> RemovalOutcome:
        try:
            await self.docker_runtime.remove_image(image.id, force=self.force)
        except RuntimeOperationError as e:
            logger.error("Failed to remove image %s: %s", image.id, e)
            return RemovalOutcome(IMAGE, image.id, OutcomeStatus.FAILED, reason=str(e))
        logger.info("Successfully removed image %s", image.id)
        return RemovalOutcome(IMAGE, image.id, OutcomeStatus.SUCCEEDED, size=image.size)

    async def remove_container(self, container_id: str, image_id: str) -> RemovalOutcome:
        try:
            await self.docker_runtime.remove_container(container_id, force=self.force)
        except RuntimeOperationError as e:
            logger.error("Failed to remove stopped container %s: %s", container_id, e)
            return RemovalOutcome(
                CONTAINER, container_id, OutcomeStatus.FAILED, reason=str(e), image_id=image_id
            )
        logger.info("Successfully removed stopped container %s", container_id)
        return RemovalOutcome(CONTAINER, container_id, OutcomeStatus.SUCCEEDED, image_id=image_id)

    # -------------------------------
    # Sequential
    # -------------------------------
    async def remove_sequential(self, targets: Sequence[Image], *, stop_on_failure: bool) -> RunResult:
        """
        Remove targets one at a time in input order.

        With stop_on_failure the run ends at the first failed image and the
        remaining targets are not attempted; otherwise every target is tried.
        """
        result = RunResult()
        for image in targets:
            outcome = await self.remove_image(image)
            result.outcomes.append(outcome)
            if outcome.succeeded:
                continue
            if result.error is None:
                result.error = f"failed to delete image {image.id}: {outcome.reason}"
            if stop_on_failure:
                result.aborted = True
                break
        return result

    # -------------------------------
    # Concurrent
    # -------------------------------
    async def remove_concurrent(self, targets: Sequence[Image]) -> RunResult:
        """
        Remove targets with a bounded pool of workers.

        Every target is attempted; there is no early abort. Outcomes are posted
        to a queue sized to the number of targets, drained after all workers
        have joined. The surfaced error is the first failure in posting order,
        which is not input order.
        """
        result = RunResult()
        if not targets:
            return result

        pending: asyncio.Queue = asyncio.Queue()
        for image in targets:
            pending.put_nowait(image)
        completed: asyncio.Queue = asyncio.Queue(maxsize=len(targets))

        async def worker() -> None:
            while True:
                try:
                    image = pending.get_nowait()
                except asyncio.QueueEmpty:
                    return
                completed.put_nowait(await self.remove_image(image))

        workers = [
            asyncio.create_task(worker())
            for _ in range(min(self.max_workers, len(targets)))
        ]
        await asyncio.gather(*workers)

        while not completed.empty():
            outcome = completed.get_nowait()
            result.outcomes.append(outcome)
            if not outcome.succeeded and result.error is None:
                result.error = f"failed to delete image {outcome.resource_id}: {outcome.reason}"
        return result

    # -------------------------------
    # Stopped-container cascade
    # -------------------------------
    async def remove_with_cascade(
        self, targets: Sequence[Image], classification: Classification
    ) -> RunResult:
        """
        Remove each target image, then the exited containers recorded against it.

        Containers of an image whose removal failed are left in place and
        reported as skipped.
        """
        result = RunResult()
        for image in targets:
            image_outcome = await self.remove_image(image)
            result.outcomes.append(image_outcome)
            container_ids = classification.containers_of(image.id)

            if not image_outcome.succeeded:
                if result.error is None:
                    result.error = f"failed to delete image {image.id}: {image_outcome.reason}"
                result.outcomes.extend(
                    RemovalOutcome(
                        CONTAINER,
                        container_id,
                        OutcomeStatus.SKIPPED,
                        reason=f"image {image.id} was not removed",
                        image_id=image.id,
                    )
                    for container_id in container_ids
                )
                continue

            for container_id in container_ids:
                result.outcomes.append(await self.remove_container(container_id, image.id))
        return result


def targets_for(images: Sequence[Image], image_ids: List[str]) -> List[Image]:
    """Resolve image ids back to snapshot images, keeping snapshot order."""
    wanted = set(image_ids)
    return [img for img in images if img.id in wanted]
