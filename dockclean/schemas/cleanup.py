# dockclean/schemas/cleanup.py
from pydantic import BaseModel
from typing import List, Literal, Optional


# ---------------------------
# Image listing schema
# ---------------------------
class ImageResponse(BaseModel):
    id: str
    tags: List[str]
    size: int
    created: int
    labels: dict[str, str]


# ---------------------------
# Removal outcome schemas
# ---------------------------
class OutcomeResponse(BaseModel):
    kind: Literal["image", "container"]
    resource_id: str
    status: Literal["succeeded", "failed", "skipped"]
    reason: Optional[str] = None
    size: int = 0
    image_id: Optional[str] = None


class RunReport(BaseModel):
    mode: str
    candidates: List[ImageResponse]
    outcomes: List[OutcomeResponse]
    images_removed: int
    images_failed: int
    containers_removed: int
    containers_failed: int
    containers_skipped: int
    reclaimed_bytes: int
    error: Optional[str] = None
    aborted: bool = False

    model_config = {
        "json_schema_extra": {
            "example": {
                "mode": "unused",
                "candidates": [],
                "outcomes": [
                    {
                        "kind": "image",
                        "resource_id": "sha256:9a0b8c7d6e5f",
                        "status": "succeeded",
                        "reason": None,
                        "size": 104857600,
                        "image_id": None,
                    }
                ],
                "images_removed": 1,
                "images_failed": 0,
                "containers_removed": 0,
                "containers_failed": 0,
                "containers_skipped": 0,
                "reclaimed_bytes": 104857600,
                "error": None,
                "aborted": False,
            }
        }
    }
