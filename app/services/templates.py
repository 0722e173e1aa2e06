"""
Per-event certificate template lookup.

A template is a background image plus an optional sibling JSON placement
config. Missing template -> caller renders the default layout. Broken or
missing config -> the image is still used, just without text overlays.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Optional

import anyio
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cert_storage import ObjectStorage, sibling_config_key
from app.core.errors import AppError
from app.models.certificate import CertificateTemplate
from app.schemas.certificate import FieldPlacement, template_config_adapter

logger = logging.getLogger(__name__)


@dataclass
class ResolvedTemplate:
    template_path: str
    placements: dict[str, FieldPlacement] = field(default_factory=dict)


def parse_template_config(raw: bytes | str) -> dict[str, FieldPlacement]:
    """Raises ValueError (json) or pydantic ValidationError on bad input."""
    data = json.loads(raw)
    return template_config_adapter.validate_python(data)


def _load_placements(storage: ObjectStorage, config_key: str) -> dict[str, FieldPlacement]:
    """Runs in a worker thread: existence check, fetch and parse in one hop."""
    if not storage.exists(config_key):
        return {}
    return parse_template_config(storage.get_bytes(config_key))


async def get_template_row(db: AsyncSession, event_id: str) -> Optional[CertificateTemplate]:
    res = await db.execute(select(CertificateTemplate).where(CertificateTemplate.event_id == event_id))
    return res.scalar_one_or_none()


async def resolve_template(
    db: AsyncSession,
    storage: ObjectStorage,
    event_id: str,
) -> Optional[ResolvedTemplate]:
    tpl = await get_template_row(db, event_id)
    if tpl is None:
        return None

    resolved = ResolvedTemplate(template_path=tpl.template_path)
    config_key = sibling_config_key(tpl.template_path)

    try:
        resolved.placements = await anyio.to_thread.run_sync(_load_placements, storage, config_key)
    except (AppError, ValueError, PydanticValidationError) as e:
        logger.warning(
            "Template config %s for event %s unusable, rendering without overlays: %s",
            config_key, event_id, e,
        )

    return resolved
