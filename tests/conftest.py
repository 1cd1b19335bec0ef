import pytest
from unittest.mock import AsyncMock

from dockclean.domain.container import Container
from dockclean.domain.errors import RuntimeOperationError
from dockclean.domain.image import Image

MB = 1024 * 1024


def make_runtime(images=(), containers=(), failing_images=(), failing_containers=()):
    """AsyncMock runtime over a fixed inventory; listed ids fail on removal."""
    docker_runtime = AsyncMock()

    def list_images(include_all=False):
        return list(images)

    def list_containers(include_all=True):
        return list(containers)

    def remove_image(image_id, force=True):
        if image_id in failing_images:
            raise RuntimeOperationError(f"conflict removing {image_id}", image_id)

    def remove_container(container_id, force=True):
        if container_id in failing_containers:
            raise RuntimeOperationError(f"conflict removing {container_id}", container_id)

    docker_runtime.list_images = AsyncMock(side_effect=list_images)
    docker_runtime.list_containers = AsyncMock(side_effect=list_containers)
    docker_runtime.remove_image = AsyncMock(side_effect=remove_image)
    docker_runtime.remove_container = AsyncMock(side_effect=remove_container)
    return docker_runtime


@pytest.fixture
def inventory():
    images = [
        Image(id="sha256:a", tags=(), size=100 * MB, created=1700000000),
        Image(id="sha256:b", tags=("app:latest",), size=50 * MB, created=1700000100),
        Image(id="sha256:c", tags=(), size=600 * MB, created=1700000200, labels={"maintainer": "ops"}),
    ]
    containers = [
        Container(id="c-exited", state="exited", image_id="sha256:b"),
    ]
    return images, containers


@pytest.fixture
def fake_runtime():
    return make_runtime
