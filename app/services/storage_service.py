"""
app/services/storage_service.py

Purpose: Object storage for uploaded images

- Accepts base64 data URLs keyed by a path string
- Stores bytes in the `files` collection
- Returns a public download URL served by the files route
"""

from typing import Optional, Dict, Any
from urllib.parse import quote

from bson import Binary

from app.core.config import settings
from app.core.exceptions import ValidationError, ResourceNotFoundError
from app.core.logging import get_logger
from app.db.mongo import get_collection, new_id, FILES
from utils.constants import ALLOWED_IMAGE_TYPES
from utils.time_utils import utc_now
from utils.validation_utils import parse_data_url, is_data_url

logger = get_logger(__name__)


def build_public_url(path: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}{settings.API_PREFIX}/files/{quote(path)}"


def _clean_path(path: str) -> str:
    path = (path or "").strip().lstrip("/")
    if not path or ".." in path.split("/"):
        raise ValidationError("Invalid storage path")
    return path


async def upload_image(data_url: str, path: str, owner_id: Optional[str] = None) -> str:
    """
    Uploads a base64 image and returns its public URL.

    Args:
        data_url: "data:image/<type>;base64,..." string (jpeg, png, webp or gif)
        path: Storage key, e.g. "listings/<seller>/<id>.jpg"
        owner_id: User who uploaded the file

    Returns:
        Public download URL

    Raises:
        ValidationError: If the payload is not an image or is too large
    """
    path = _clean_path(path)

    parsed = parse_data_url(data_url)
    if not parsed:
        raise ValidationError("Image must be a base64 data URL")

    content_type, raw = parsed
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(
            "Only JPEG, PNG, WebP or GIF images are allowed",
            details={"content_type": content_type, "allowed": sorted(ALLOWED_IMAGE_TYPES)}
        )

    if len(raw) > settings.MAX_UPLOAD_BYTES:
        raise ValidationError(
            "Image is too large",
            details={"size": len(raw), "max_size": settings.MAX_UPLOAD_BYTES}
        )

    await get_collection(FILES).update_one(
        {"_id": path},
        {
            "$set": {
                "content_type": content_type,
                "data": Binary(raw),
                "size": len(raw),
                "owner_id": owner_id,
                "created_at": utc_now(),
            }
        },
        upsert=True
    )

    logger.info(f"Stored image {path} ({len(raw)} bytes)", extra={"user_id": owner_id})
    return build_public_url(path)


async def store_image_if_needed(image: str, prefix: str, owner_id: Optional[str] = None) -> str:
    """
    Uploads ``image`` when it is a data URL; plain links are kept as they are.
    """
    if not is_data_url(image):
        return image
    return await upload_image(image, f"{prefix}/{new_id()}", owner_id=owner_id)


async def get_file(path: str) -> Dict[str, Any]:
    """
    Loads a stored file.

    Raises:
        ResourceNotFoundError: If nothing is stored at ``path``
    """
    doc = await get_collection(FILES).find_one({"_id": _clean_path(path)})
    if not doc:
        raise ResourceNotFoundError("File not found")
    return {"content_type": doc["content_type"], "data": bytes(doc["data"])}
