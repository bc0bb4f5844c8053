import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from clipsplice.app.api.dependencies import get_job_service
from clipsplice.app.schemas.clips import ClipOut
from clipsplice.app.schemas.jobs import MetadataOut, ProcessVideoResponse, parse_job_request
from clipsplice.domain.errors import InvalidJobRequest, ToolError
from clipsplice.domain.services.job_service import JobService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["jobs"])


@router.post("/process-video", response_model=ProcessVideoResponse)
async def process_video(request: Request, service: JobService = Depends(get_job_service)):
    """
    Download the video at `videoUrl` and cut one clip per entry in `timestamps`.
    The whole request is validated before anything is downloaded.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Request body must be valid JSON")

    try:
        job_request = parse_job_request(payload)
    except InvalidJobRequest as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        record = await service.process(job_request)
    except (ToolError, OSError) as e:
        logger.error("Error processing video %s: %s", job_request.video_url, e)
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to process video", "details": str(e)},
        )

    return ProcessVideoResponse(
        success=True,
        request_id=record.request_id,
        message=f"Successfully processed {len(record.clips)} clips",
        clips=[ClipOut(index=c.index, label=c.label, filename=c.filename) for c in record.clips],
    )


@router.get("/metadata/{request_id}", response_model=MetadataOut)
async def get_metadata(request_id: str, service: JobService = Depends(get_job_service)):
    record = service.get_metadata(request_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Metadata not found")
    return MetadataOut.from_record(record)
