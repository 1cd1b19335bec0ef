"""
Cross-reference images with containers to find images whose every container
is stopped.

Each container observation is folded into its image's state with a lattice
join (ACTIVE > EXITED > UNREFERENCED). The join is commutative and
idempotent, so the result does not depend on container enumeration order.
"""
from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Tuple

from dockclean.domain.container import Container
from dockclean.domain.image import Image


class ClassificationState(IntEnum):
    UNREFERENCED = 0
    EXITED = 1
    ACTIVE = 2

    def merge(self, other: "ClassificationState") -> "ClassificationState":
        return max(self, other)

    @classmethod
    def observe(cls, container: Container) -> "ClassificationState":
        return cls.EXITED if container.exited else cls.ACTIVE


@dataclass(frozen=True)
class Classification:
    states: Mapping[str, ClassificationState]
    containers: Mapping[str, Tuple[str, ...]]  # image id -> exited container ids

    def state_of(self, image_id: str) -> ClassificationState:
        return self.states[image_id]

    def removable(self) -> List[str]:
        """Image ids whose containers are all exited, in snapshot order."""
        return [
            image_id for image_id, state in self.states.items()
            if state is ClassificationState.EXITED
        ]

    def containers_of(self, image_id: str) -> Tuple[str, ...]:
        return self.containers.get(image_id, ())


def classify(images: Iterable[Image], containers: Iterable[Container]) -> Classification:
    states: Dict[str, ClassificationState] = {
        img.id: ClassificationState.UNREFERENCED for img in images
    }
    exited: Dict[str, List[str]] = {}

    for container in containers:
        current = states.get(container.image_id)
        if current is None:
            # image is not part of the snapshot
            continue
        states[container.image_id] = current.merge(ClassificationState.observe(container))
        if container.exited:
            exited.setdefault(container.image_id, []).append(container.id)

    return Classification(
        states=MappingProxyType(states),
        containers=MappingProxyType(
            {image_id: tuple(ids) for image_id, ids in exited.items()}
        ),
    )
