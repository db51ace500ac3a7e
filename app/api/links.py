"""
app/api/links.py

Purpose: Import a listing draft from a product link
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_session
from app.core.security import AuthSession
from app.schemas.misc import LinkRequest, LinkPreviewResult, ScreenshotResult
from app.services.link_preview_service import get_link_preview_service
from app.services.screenshot_service import get_screenshot_service

router = APIRouter(prefix="/links", tags=["Links"])


@router.post("/preview", response_model=LinkPreviewResult)
async def preview_link(payload: LinkRequest, session: AuthSession = Depends(get_session)):
    """Title, image and brand read from the page; success is false when the site blocks us."""
    return LinkPreviewResult(**await get_link_preview_service().crawl_link_metadata(payload.url))


@router.post("/screenshot", response_model=ScreenshotResult)
async def capture_link(payload: LinkRequest, session: AuthSession = Depends(get_session)):
    return ScreenshotResult(base64=await get_screenshot_service().capture(payload.url))
