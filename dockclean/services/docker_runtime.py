import asyncio
from typing import Any, Dict, List, Optional

import docker
from docker.errors import DockerException, NotFound
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import RequestException

from dockclean.core.config import Settings
from dockclean.core.logging import get_logger
from dockclean.domain.container import Container
from dockclean.domain.errors import RuntimeConnectionError, RuntimeOperationError
from dockclean.domain.image import Image
from dockclean.domain.ports import DockerRuntime

logger = get_logger(__name__)

# Placeholder the daemon reports for dangling images on older API versions.
NONE_TAG = "<none>:<none>"


def image_from_summary(summary: Dict[str, Any]) -> Image:
    """Build an Image from one entry of the /images/json listing."""
    tags = tuple(t for t in (summary.get("RepoTags") or []) if t != NONE_TAG)
    return Image(
        id=summary["Id"],
        tags=tags,
        size=int(summary.get("Size") or 0),
        created=int(summary.get("Created") or 0),
        labels=dict(summary.get("Labels") or {}),
    )


def container_from_summary(summary: Dict[str, Any]) -> Container:
    """Build a Container from one entry of the /containers/json listing."""
    return Container(
        id=summary["Id"],
        state=summary.get("State") or "",
        image_id=summary.get("ImageID") or "",
    )


class DockerSDKRuntime(DockerRuntime):
    def __init__(self, docker_client: docker.DockerClient):
        self.docker_client = docker_client

    @classmethod
    def connect(cls, settings: Optional[Settings] = None) -> "DockerSDKRuntime":
        """Connect using the DOCKER_* environment and negotiate the API version."""
        settings = settings or Settings()
        try:
            client = docker.from_env(
                version=settings.DOCKER_API_VERSION,
                timeout=settings.DOCKER_TIMEOUT,
            )
            client.ping()
        except (DockerException, RequestException) as e:
            raise RuntimeConnectionError(f"Failed to connect to Docker: {e}") from e
        logger.debug("Connected to Docker API version %s", client.api.api_version)
        return cls(client)

    # -------------------------------
    # Inventory
    # -------------------------------
    async def list_images(self, include_all: bool = False) -> List[Image]:
        try:
            summaries = await asyncio.to_thread(self.docker_client.api.images, all=include_all)
        except RequestsConnectionError as e:
            raise RuntimeConnectionError(f"Docker daemon unreachable: {e}") from e
        except (DockerException, RequestException) as e:
            raise RuntimeOperationError(f"Error listing images: {e}") from e
        return [image_from_summary(s) for s in summaries]

    async def list_containers(self, include_all: bool = True) -> List[Container]:
        try:
            summaries = await asyncio.to_thread(self.docker_client.api.containers, all=include_all)
        except RequestsConnectionError as e:
            raise RuntimeConnectionError(f"Docker daemon unreachable: {e}") from e
        except (DockerException, RequestException) as e:
            raise RuntimeOperationError(f"Error listing containers: {e}") from e
        return [container_from_summary(s) for s in summaries]

    # -------------------------------
    # Removal
    # -------------------------------
    async def remove_image(self, image_id: str, force: bool = True) -> None:
        try:
            await asyncio.to_thread(self.docker_client.api.remove_image, image_id, force=force)
        except NotFound as e:
            raise RuntimeOperationError(f"Image {image_id} no longer exists", image_id) from e
        except (DockerException, RequestException) as e:
            raise RuntimeOperationError(str(e), image_id) from e

    async def remove_container(self, container_id: str, force: bool = True) -> None:
        try:
            await asyncio.to_thread(
                self.docker_client.api.remove_container, container_id, force=force
            )
        except NotFound as e:
            raise RuntimeOperationError(f"Container {container_id} no longer exists", container_id) from e
        except (DockerException, RequestException) as e:
            raise RuntimeOperationError(str(e), container_id) from e
