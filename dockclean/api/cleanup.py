# dockclean/api/cleanup.py
from functools import lru_cache
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from dockclean.core.config import Settings
from dockclean.domain.errors import RuntimeConnectionError, RuntimeOperationError, UsageError
from dockclean.domain.image import Image
from dockclean.domain.outcome import CONTAINER, IMAGE
from dockclean.schemas.cleanup import ImageResponse, OutcomeResponse, RunReport
from dockclean.services.cleanup_service import CleanupReport, CleanupService
from dockclean.services.docker_runtime import DockerSDKRuntime


@lru_cache
def get_settings() -> Settings:
    return Settings()


@lru_cache
def _connected_runtime() -> DockerSDKRuntime:
    return DockerSDKRuntime.connect(get_settings())


def get_cleanup_service(settings: Settings = Depends(get_settings)) -> CleanupService:
    try:
        docker_runtime = _connected_runtime()
    except RuntimeConnectionError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return CleanupService(docker_runtime, settings)


def to_image_response(img: Image) -> ImageResponse:
    return ImageResponse(
        id=img.id,
        tags=list(img.tags),
        size=img.size,
        created=img.created,
        labels=dict(img.labels),
    )


def to_run_report(report: CleanupReport) -> RunReport:
    result = report.result
    return RunReport(
        mode=report.mode,
        candidates=[to_image_response(img) for img in report.candidates],
        outcomes=[
            OutcomeResponse(
                kind=o.kind,
                resource_id=o.resource_id,
                status=o.status.value,
                reason=o.reason,
                size=o.size,
                image_id=o.image_id,
            )
            for o in result.outcomes
        ],
        images_removed=result.succeeded(IMAGE),
        images_failed=result.failed(IMAGE),
        containers_removed=result.succeeded(CONTAINER),
        containers_failed=result.failed(CONTAINER),
        containers_skipped=result.skipped(CONTAINER),
        reclaimed_bytes=result.reclaimed_bytes,
        error=result.error,
        aborted=result.aborted,
    )


async def _run(coro) -> RunReport:
    try:
        report = await coro
    except UsageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeConnectionError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except RuntimeOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return to_run_report(report)


router = APIRouter(tags=["cleanup"])


# ---------------------------
# Dry run
# ---------------------------
@router.get(
    "/images/unused",
    response_model=List[ImageResponse],
    summary="List unused images",
    description="Images with no tags. Nothing is removed.",
)
async def list_unused_images(service: CleanupService = Depends(get_cleanup_service)):
    report = await _run(service.dry_run())
    return report.candidates


# ---------------------------
# Removal verbs
# ---------------------------
@router.post("/cleanup/unused", response_model=RunReport, summary="Remove unused images")
async def remove_unused_images(
    concurrent: bool = Query(False, description="Remove with a bounded worker pool"),
    service: CleanupService = Depends(get_cleanup_service),
):
    return await _run(service.remove_unused(concurrent=concurrent))


@router.post("/cleanup/verbose", response_model=RunReport, summary="Remove unused images, reporting each one")
async def verbose_cleanup(service: CleanupService = Depends(get_cleanup_service)):
    return await _run(service.verbose_cleanup())


@router.post("/cleanup/size", response_model=RunReport, summary="Remove unused images above a size limit")
async def remove_exceeding_size(
    limit: float = Query(..., description="Size limit, images strictly larger are removed"),
    unit: str = Query(..., description="B, KB, MB or GB"),
    service: CleanupService = Depends(get_cleanup_service),
):
    return await _run(service.remove_exceeding_size(limit, unit))


@router.post(
    "/cleanup/stopped",
    response_model=RunReport,
    summary="Remove images used only by stopped containers",
)
async def cleanup_stopped(service: CleanupService = Depends(get_cleanup_service)):
    return await _run(service.cleanup_stopped())
