# app/controllers/templates_controller.py
from __future__ import annotations

import io
import logging
from typing import Optional

import anyio
from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.events_controller import attach_template, get_event_or_404
from app.core.cert_ids import Clock
from app.core.cert_storage import ObjectStorage, public_url, sibling_config_key, template_key
from app.core.config import settings
from app.core.errors import ValidationError
from app.services.templates import parse_template_config

logger = logging.getLogger(__name__)

# browsers also send image/jpg, image/pjpeg and image/x-png; Pillow decides the real format
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/pjpeg", "image/png", "image/x-png", "image/gif"}
ALLOWED_EXTENSIONS = {"jpeg", "jpg", "png", "gif"}
PIL_FORMATS = {"JPEG", "PNG", "GIF"}


def _check_image(data: bytes, filename: str, content_type: Optional[str]) -> str:
    """Returns the normalized file extension or raises ValidationError."""
    if not data:
        raise ValidationError("The certificate field is required.", "Empty upload")

    if len(data) > settings.TEMPLATE_MAX_BYTES:
        kb = settings.TEMPLATE_MAX_BYTES // 1024
        raise ValidationError(
            f"The certificate must not be greater than {kb} kilobytes.",
            "File too large",
        )

    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext not in ALLOWED_EXTENSIONS or (content_type and content_type not in ALLOWED_IMAGE_TYPES):
        raise ValidationError(
            "The certificate must be a file of type: jpeg, png, jpg, gif.",
            f"Unsupported file {filename!r} ({content_type})",
        )

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            fmt = img.format
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValidationError("The certificate must be an image.", str(e))

    if fmt not in PIL_FORMATS:
        raise ValidationError("The certificate must be a file of type: jpeg, png, jpg, gif.", f"Format {fmt}")

    return ext


async def upload_template(
    db: AsyncSession,
    storage: ObjectStorage,
    *,
    event_id: str,
    filename: str,
    content_type: Optional[str],
    data: bytes,
    template_config: Optional[str],
    clock: Clock,
) -> dict:
    event_id = (event_id or "").strip()
    if not event_id or len(event_id) > 255:
        raise ValidationError("The event id field is required.", "Invalid eventId")

    ext = _check_image(data, filename or "", content_type)

    config = None
    if template_config and template_config.strip():
        try:
            config = parse_template_config(template_config)
        except (ValueError, PydanticValidationError) as e:
            raise ValidationError("templateConfig is not a valid placement map.", str(e))

    await get_event_or_404(db, event_id)

    stamp = clock().strftime("%Y%m%d%H%M%S")
    name = f"certificate_{event_id}_{stamp}.{ext}"
    key = template_key(name)

    image_type = f"image/{'jpeg' if ext in ('jpg', 'jpeg') else ext}"
    await anyio.to_thread.run_sync(storage.put_bytes, key, data, image_type)
    if config is not None:
        await anyio.to_thread.run_sync(
            storage.put_bytes, sibling_config_key(key), template_config.encode("utf-8"), "application/json"
        )

    await attach_template(db, event_id, key, config)
    logger.info("Certificate template %s stored for event %s (config: %s)", key, event_id, config is not None)

    return {
        "imageUrl": public_url(key),
        "filename": name,
        "path": key,
    }
