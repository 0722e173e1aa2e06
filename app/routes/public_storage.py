from __future__ import annotations

import mimetypes
from urllib.parse import quote

import anyio
from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.core.cert_storage import ObjectStorage, get_storage

router = APIRouter(prefix="/storage", tags=["Public - Storage Proxy"])


@router.get("/{key:path}")
async def get_object(key: str, storage: ObjectStorage = Depends(get_storage)):
    """
    Proxy for stored objects, so download references stay on the API domain.

    Example:
      /api/storage/certificates/generated/certificate_CERT-0194....pdf
    """
    data = await anyio.to_thread.run_sync(storage.get_bytes, key)

    content_type = mimetypes.guess_type(key)[0] or "application/octet-stream"
    filename = key.split("/")[-1] or "file"
    headers = {
        "Content-Disposition": f"inline; filename*=UTF-8''{quote(filename)}",
        "Cache-Control": "public, max-age=300",
    }
    return Response(content=data, media_type=content_type, headers=headers)
