import base64

import pytest

from app.core.config import settings
from app.core.exceptions import ValidationError, ResourceNotFoundError
from app.services import storage_service, user_service


def data_url(raw: bytes, content_type: str = "image/jpeg") -> str:
    return f"data:{content_type};base64," + base64.b64encode(raw).decode()


async def test_upload_and_read_back():
    url = await storage_service.upload_image(data_url(b"jpeg-bytes"), "listings/u1/a.jpg", owner_id="u1")

    assert url == f"{settings.PUBLIC_BASE_URL}{settings.API_PREFIX}/files/listings/u1/a.jpg"
    stored = await storage_service.get_file("listings/u1/a.jpg")
    assert stored == {"content_type": "image/jpeg", "data": b"jpeg-bytes"}


async def test_upload_overwrites_same_path():
    await storage_service.upload_image(data_url(b"old"), "avatars/u1/me")
    await storage_service.upload_image(data_url(b"new", "image/png"), "avatars/u1/me")

    stored = await storage_service.get_file("avatars/u1/me")
    assert stored["data"] == b"new"
    assert stored["content_type"] == "image/png"


async def test_upload_rejects_non_image():
    with pytest.raises(ValidationError):
        await storage_service.upload_image(data_url(b"%PDF", "application/pdf"), "docs/a.pdf")


async def test_upload_rejects_svg():
    svg = b"<svg xmlns=\"http://www.w3.org/2000/svg\"><script>alert(1)</script></svg>"

    with pytest.raises(ValidationError) as exc:
        await storage_service.upload_image(data_url(svg, "image/svg+xml"), "uploads/u1/evil")
    assert exc.value.details["content_type"] == "image/svg+xml"

    with pytest.raises(ResourceNotFoundError):
        await storage_service.get_file("uploads/u1/evil")


async def test_upload_rejects_oversized(monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 4)
    with pytest.raises(ValidationError) as exc:
        await storage_service.upload_image(data_url(b"too large"), "listings/u1/big.jpg")
    assert exc.value.details["max_size"] == 4


async def test_upload_rejects_bad_payload_and_path():
    with pytest.raises(ValidationError):
        await storage_service.upload_image("not a data url", "listings/u1/a.jpg")
    with pytest.raises(ValidationError):
        await storage_service.upload_image(data_url(b"x"), "../secrets")
    with pytest.raises(ValidationError):
        await storage_service.upload_image(data_url(b"x"), "")


async def test_missing_file():
    with pytest.raises(ResourceNotFoundError):
        await storage_service.get_file("nothing/here")


async def test_plain_links_are_kept():
    assert await storage_service.store_image_if_needed("https://example.com/a.jpg", "listings/u1") == "https://example.com/a.jpg"

    url = await storage_service.store_image_if_needed(data_url(b"img"), "listings/u1", owner_id="u1")
    assert "/files/listings/u1/" in url


async def test_profile_avatar_upload(make_user):
    user = await make_user()

    updated = await user_service.update_user_profile(user["_id"], {"avatar": data_url(b"face"), "phone": "0912345678"})

    assert "/files/avatars/" in updated["avatar"]
    assert updated["phone"] == "0912345678"


async def test_profile_rejects_bad_phone(make_user):
    user = await make_user()
    with pytest.raises(ValidationError):
        await user_service.update_user_profile(user["_id"], {"phone": "123"})
