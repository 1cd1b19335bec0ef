import asyncio

import pytest
from unittest.mock import AsyncMock, call

from dockclean.domain.errors import RuntimeOperationError
from dockclean.domain.image import Image
from dockclean.domain.outcome import CONTAINER, IMAGE, OutcomeStatus
from dockclean.services.classifier import classify
from dockclean.domain.container import Container
from dockclean.services.orchestrator import RemovalOrchestrator, targets_for


def _images(n):
    return [Image(id=f"img-{i}", size=10) for i in range(n)]


@pytest.mark.asyncio
async def test_sequential_stop_on_failure_aborts(fake_runtime):
    images = _images(4)
    docker_runtime = fake_runtime(images, failing_images={"img-1"})
    orchestrator = RemovalOrchestrator(docker_runtime)

    result = await orchestrator.remove_sequential(images, stop_on_failure=True)

    assert result.aborted is True
    assert [o.resource_id for o in result.outcomes] == ["img-0", "img-1"]
    assert result.succeeded() == 1
    assert result.failed() == 1
    assert "img-1" in result.error
    assert docker_runtime.remove_image.await_args_list == [
        call("img-0", force=True),
        call("img-1", force=True),
    ]


@pytest.mark.asyncio
async def test_sequential_continue_attempts_every_target(fake_runtime):
    images = _images(4)
    docker_runtime = fake_runtime(images, failing_images={"img-1"})
    orchestrator = RemovalOrchestrator(docker_runtime)

    result = await orchestrator.remove_sequential(images, stop_on_failure=False)

    assert result.aborted is False
    assert [o.resource_id for o in result.outcomes] == ["img-0", "img-1", "img-2", "img-3"]
    assert [o.status for o in result.outcomes] == [
        OutcomeStatus.SUCCEEDED,
        OutcomeStatus.FAILED,
        OutcomeStatus.SUCCEEDED,
        OutcomeStatus.SUCCEEDED,
    ]
    assert result.reclaimed_bytes == 30


@pytest.mark.asyncio
@pytest.mark.parametrize("failing", ["img-0", "img-3", "img-6"])
async def test_concurrent_single_failure(fake_runtime, failing):
    images = _images(7)
    docker_runtime = fake_runtime(images, failing_images={failing})
    orchestrator = RemovalOrchestrator(docker_runtime, max_workers=3)

    result = await orchestrator.remove_concurrent(images)

    assert result.failed() == 1
    assert result.succeeded() == 6
    assert result.error.startswith(f"failed to delete image {failing}: ")
    assert result.aborted is False
    assert docker_runtime.remove_image.await_count == 7


@pytest.mark.asyncio
async def test_concurrent_respects_worker_cap():
    in_flight = 0
    peak = 0

    async def remove_image(image_id, force=True):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1

    docker_runtime = AsyncMock()
    docker_runtime.remove_image = AsyncMock(side_effect=remove_image)
    orchestrator = RemovalOrchestrator(docker_runtime, max_workers=2)

    result = await orchestrator.remove_concurrent(_images(6))

    assert result.succeeded() == 6
    assert peak == 2


@pytest.mark.asyncio
async def test_concurrent_no_targets():
    docker_runtime = AsyncMock()
    result = await RemovalOrchestrator(docker_runtime).remove_concurrent([])

    assert result.outcomes == []
    assert result.ok
    docker_runtime.remove_image.assert_not_awaited()


def test_max_workers_must_be_positive():
    with pytest.raises(ValueError):
        RemovalOrchestrator(AsyncMock(), max_workers=0)


@pytest.mark.asyncio
async def test_cascade_removes_containers_after_image():
    images = [Image(id="img", size=5)]
    containers = [
        Container(id="x", state="exited", image_id="img"),
        Container(id="y", state="exited", image_id="img"),
    ]
    order = []
    docker_runtime = AsyncMock()
    docker_runtime.remove_image = AsyncMock(side_effect=lambda image_id, force=True: order.append(image_id))
    docker_runtime.remove_container = AsyncMock(side_effect=lambda container_id, force=True: order.append(container_id))
    classification = classify(images, containers)

    result = await RemovalOrchestrator(docker_runtime).remove_with_cascade(images, classification)

    assert order[0] == "img"
    assert sorted(order[1:]) == ["x", "y"]
    assert result.succeeded(IMAGE) == 1
    assert result.succeeded(CONTAINER) == 2
    assert result.ok


@pytest.mark.asyncio
async def test_cascade_skips_containers_when_image_fails(fake_runtime):
    images = [Image(id="img")]
    containers = [Container(id="x", state="exited", image_id="img")]
    docker_runtime = fake_runtime(images, containers, failing_images={"img"})
    classification = classify(images, containers)

    result = await RemovalOrchestrator(docker_runtime).remove_with_cascade(images, classification)

    docker_runtime.remove_container.assert_not_awaited()
    assert result.failed(IMAGE) == 1
    assert result.failed(CONTAINER) == 0
    assert result.skipped(CONTAINER) == 1
    skipped = [o for o in result.outcomes if o.kind == CONTAINER][0]
    assert skipped.resource_id == "x"
    assert skipped.image_id == "img"


@pytest.mark.asyncio
async def test_cascade_container_failure_keeps_image_removed(fake_runtime):
    images = [Image(id="img", size=7)]
    containers = [
        Container(id="x", state="exited", image_id="img"),
        Container(id="y", state="exited", image_id="img"),
    ]
    docker_runtime = fake_runtime(images, containers, failing_containers={"x"})
    classification = classify(images, containers)

    result = await RemovalOrchestrator(docker_runtime).remove_with_cascade(images, classification)

    assert result.succeeded(IMAGE) == 1
    assert result.failed(CONTAINER) == 1
    assert result.succeeded(CONTAINER) == 1
    assert result.reclaimed_bytes == 7
    assert docker_runtime.remove_image.await_count == 1


@pytest.mark.asyncio
async def test_vanished_image_is_an_item_failure():
    docker_runtime = AsyncMock()
    docker_runtime.remove_image = AsyncMock(
        side_effect=RuntimeOperationError("Image gone no longer exists", "gone")
    )

    outcome = await RemovalOrchestrator(docker_runtime).remove_image(Image(id="gone"))

    assert outcome.status is OutcomeStatus.FAILED
    assert "no longer exists" in outcome.reason


def test_targets_for_keeps_snapshot_order():
    images = _images(3)

    assert [img.id for img in targets_for(images, ["img-2", "img-0"])] == ["img-0", "img-2"]
