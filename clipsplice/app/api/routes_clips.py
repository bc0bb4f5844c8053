from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from clipsplice.app.api.dependencies import get_storage
from clipsplice.infrastructure.storage import ClipStorage

router = APIRouter(tags=["clips"])


@router.get("/clips/{filename}")
async def get_clip(filename: str, storage: ClipStorage = Depends(get_storage)):
    """
    Stream a finished clip. Names that are not a plain *.mp4 file inside the
    clips directory are answered with 404, same as a missing file.
    """
    path = storage.resolve_clip(filename)
    if path is None:
        raise HTTPException(status_code=404, detail="Clip not found")
    return FileResponse(path, media_type="video/mp4")
