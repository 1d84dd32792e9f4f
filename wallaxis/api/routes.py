"""FastAPI route definitions."""

from __future__ import annotations

from fastapi import APIRouter

from wallaxis.services.wall_service import WallService
from wallaxis.api.schemas import (
    CenterlineRequest, CenterlineResponse, MappingRequest, MappingResponse,
    StageInfo, WallMapping,
)

router = APIRouter()

# Shared service instance
_service = WallService()


@router.post("/centerlines", response_model=CenterlineResponse)
async def build_centerlines(request: CenterlineRequest) -> CenterlineResponse:
    """Reconstruct wall centerlines from raw floor-plan lines."""
    segments = [s.to_segment() for s in request.segments]
    axes = [a.to_axis() for a in request.axes]

    context = _service.process(segments, axes, request.config)

    return CenterlineResponse(
        centerlines=context.centerlines,
        stats=context.stats,
        segment_count=len(segments),
    )


@router.post("/mappings", response_model=MappingResponse)
async def map_walls(request: MappingRequest) -> MappingResponse:
    """Map each centerline onto the frames that support it."""
    frames = [f.to_frame() for f in request.frames]
    results = _service.map_walls(
        request.centerlines, frames, request.config, request.origin_offset,
    )

    return MappingResponse(
        walls=[WallMapping.from_result(r) for r in results],
        unmapped_count=sum(1 for r in results if not r.has_mapping),
    )


@router.get("/stages", response_model=list[StageInfo])
async def list_stages() -> list[StageInfo]:
    """List the processing stages in pipeline order."""
    return [StageInfo(**s) for s in _service.list_stages()]


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
