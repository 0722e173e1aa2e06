# app/core/cert_storage.py
"""
Object storage for certificate templates and generated PDFs.

Key layout:
    certificates/{name}              uploaded templates (+ sibling .json config)
    certificates/generated/{name}    issued certificate PDFs

Two backends share one interface: MinIO (production) and the local
filesystem (development, tests). STORAGE_BACKEND picks one.
"""
from __future__ import annotations

import logging
import os
from io import BytesIO
from pathlib import Path
from typing import Protocol
from urllib.parse import quote

from minio import Minio
from minio.error import S3Error

from app.core.config import settings
from app.core.errors import NotFoundError, StorageError
from app.core.minio_client import get_minio, ensure_bucket

logger = logging.getLogger(__name__)

TEMPLATE_PREFIX = "certificates"
GENERATED_PREFIX = "certificates/generated"


def template_key(filename: str) -> str:
    return f"{TEMPLATE_PREFIX}/{filename}"


def generated_key(filename: str) -> str:
    return f"{GENERATED_PREFIX}/{filename}"


def sibling_config_key(key: str) -> str:
    """certificates/certificate_E1_20250110.png -> certificates/certificate_E1_20250110.json"""
    base, _ext = os.path.splitext(key)
    return f"{base}.json"


def public_url(key: str) -> str:
    """Download reference handed to clients; served by the /storage route."""
    base = settings.PUBLIC_BASE_URL.rstrip("/") + settings.API_PREFIX
    return f"{base}/storage/{quote(key)}"


class ObjectStorage(Protocol):
    def put_bytes(self, key: str, data: bytes, content_type: str) -> str: ...

    def get_bytes(self, key: str) -> bytes: ...

    def exists(self, key: str) -> bool: ...

    def delete(self, key: str) -> None: ...


class MinioStorage:
    def __init__(self, client: Minio, bucket: str):
        self._minio = client
        self.bucket = bucket
        self._bucket_ready = False

    def _ensure(self) -> None:
        if not self._bucket_ready:
            try:
                ensure_bucket(self._minio, self.bucket)
            except RuntimeError as e:
                raise StorageError("Storage unavailable", str(e)) from e
            self._bucket_ready = True

    def put_bytes(self, key: str, data: bytes, content_type: str) -> str:
        self._ensure()
        try:
            self._minio.put_object(
                bucket_name=self.bucket,
                object_name=key,
                data=BytesIO(data),
                length=len(data),
                content_type=content_type or "application/octet-stream",
            )
        except S3Error as e:
            raise StorageError("Failed to store file", f"MinIO put_object failed: {e}") from e
        return key

    def get_bytes(self, key: str) -> bytes:
        self._ensure()
        try:
            resp = self._minio.get_object(self.bucket, key)
        except S3Error as e:
            if e.code in ("NoSuchKey", "NoSuchObject"):
                raise NotFoundError("File not found", key) from e
            raise StorageError("Failed to read file", f"MinIO get_object failed: {e}") from e
        try:
            return resp.read()
        finally:
            resp.close()
            resp.release_conn()

    def exists(self, key: str) -> bool:
        self._ensure()
        try:
            self._minio.stat_object(self.bucket, key)
            return True
        except S3Error as e:
            if e.code in ("NoSuchKey", "NoSuchObject"):
                return False
            raise StorageError("Failed to read file", f"MinIO stat_object failed: {e}") from e

    def delete(self, key: str) -> None:
        self._ensure()
        try:
            self._minio.remove_object(self.bucket, key)
        except S3Error as e:
            raise StorageError("Failed to delete file", f"MinIO remove_object failed: {e}") from e


class LocalStorage:
    def __init__(self, root: str | os.PathLike):
        self.root = Path(root).resolve()

    def _path(self, key: str) -> Path:
        p = (self.root / key).resolve()
        # keys come from URLs on the /storage route; never leave the root
        if p != self.root and self.root not in p.parents:
            raise NotFoundError("File not found", key)
        return p

    def put_bytes(self, key: str, data: bytes, content_type: str) -> str:
        p = self._path(key)
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_bytes(data)
        except OSError as e:
            raise StorageError("Failed to store file", str(e)) from e
        return key

    def get_bytes(self, key: str) -> bytes:
        p = self._path(key)
        if not p.is_file():
            raise NotFoundError("File not found", key)
        try:
            return p.read_bytes()
        except OSError as e:
            raise StorageError("Failed to read file", str(e)) from e

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError("Failed to delete file", str(e)) from e


_storage: ObjectStorage | None = None


def get_storage() -> ObjectStorage:
    """FastAPI dependency; one backend instance per process."""
    global _storage
    if _storage is None:
        backend = settings.STORAGE_BACKEND.strip().lower()
        if backend == "local":
            _storage = LocalStorage(settings.LOCAL_STORAGE_ROOT)
        elif backend == "minio":
            _storage = MinioStorage(get_minio(), settings.MINIO_BUCKET)
        else:
            raise RuntimeError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
        logger.info("Object storage backend: %s", backend)
    return _storage
