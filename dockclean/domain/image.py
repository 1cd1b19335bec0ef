from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True)
class Image:
    id: str
    tags: Tuple[str, ...] = ()
    size: int = 0           # bytes
    created: int = 0        # unix seconds
    labels: Dict[str, str] = field(default_factory=dict, hash=False, compare=False)

    @property
    def unused(self) -> bool:
        return not self.tags
