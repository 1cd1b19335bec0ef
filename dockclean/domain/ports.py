from typing import Protocol, List

from dockclean.domain.container import Container
from dockclean.domain.image import Image


class DockerRuntime(Protocol):
    # -------------------------------
    # Inventory
    # -------------------------------
    async def list_images(self, include_all: bool = False) -> List[Image]:
        """List images. include_all also returns intermediate layers."""
        ...

    async def list_containers(self, include_all: bool = True) -> List[Container]:
        """List containers. include_all also returns stopped ones."""
        ...

    # -------------------------------
    # Removal
    # -------------------------------
    async def remove_image(self, image_id: str, force: bool = True) -> None:
        """Remove an image by ID. Raises RuntimeOperationError on failure."""
        ...

    async def remove_container(self, container_id: str, force: bool = True) -> None:
        """Remove a container by ID. Raises RuntimeOperationError on failure."""
        ...
