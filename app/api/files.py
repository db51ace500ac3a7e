"""
app/api/files.py

Purpose: Image upload and download
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.api.deps import get_session
from app.core.security import AuthSession
from app.db.mongo import new_id
from app.schemas.misc import UploadRequest, UploadResult
from app.services import storage_service
from utils.constants import ALLOWED_IMAGE_TYPES

router = APIRouter(tags=["Files"])


@router.post("/uploads", response_model=UploadResult, status_code=201)
async def upload_image(payload: UploadRequest, session: AuthSession = Depends(get_session)):
    """Stores a base64 image under the caller's folder and returns its URL."""
    path = f"{payload.folder.strip('/')}/{session.user_id}/{new_id()}"
    url = await storage_service.upload_image(payload.data_url, path, owner_id=session.user_id)
    return UploadResult(url=url)


@router.get("/files/{path:path}")
async def get_file(path: str):
    stored = await storage_service.get_file(path)
    headers = {
        "Cache-Control": "public, max-age=31536000, immutable",
        "X-Content-Type-Options": "nosniff",
        "Content-Security-Policy": "default-src 'none'; sandbox",
    }
    # Files stored before the raster allowlist are never rendered inline
    if stored["content_type"] not in ALLOWED_IMAGE_TYPES:
        headers["Content-Disposition"] = "attachment"
    return Response(content=stored["data"], media_type=stored["content_type"], headers=headers)
