"""Selection of images that are eligible for removal."""
import math
from enum import Enum
from typing import Iterable, List

from dockclean.domain.errors import UsageError
from dockclean.domain.image import Image


class SizeUnit(str, Enum):
    B = "B"
    KB = "KB"
    MB = "MB"
    GB = "GB"

    @property
    def multiplier(self) -> int:
        return 1024 ** list(SizeUnit).index(self)

    @classmethod
    def parse(cls, unit: str | None) -> "SizeUnit":
        if not unit:
            raise UsageError("A size limit requires a unit (B, KB, MB or GB)")
        try:
            return cls(unit.strip().upper())
        except ValueError:
            raise UsageError(
                f"Unknown size unit {unit!r}; expected one of B, KB, MB, GB"
            ) from None


def to_bytes(size: float, unit: str | SizeUnit) -> int:
    """Normalize a (value, unit) pair to bytes using 1024-based multipliers."""
    if not isinstance(unit, SizeUnit):
        unit = SizeUnit.parse(unit)
    if not math.isfinite(size) or size < 0:
        raise UsageError(f"Size limit must be a finite, non-negative number, got {size}")
    return int(size * unit.multiplier)


def select_unused(images: Iterable[Image]) -> List[Image]:
    """Images with no tags, in input order."""
    return [img for img in images if img.unused]


def select_exceeding_size(images: Iterable[Image], threshold_bytes: int) -> List[Image]:
    """Images strictly larger than threshold_bytes; an image exactly at the limit stays."""
    return [img for img in images if img.size > threshold_bytes]
