from minio import Minio
from minio.error import S3Error

from app.core.config import settings


def get_minio() -> Minio:
    return Minio(
        endpoint=settings.MINIO_ENDPOINT.strip(),
        access_key=settings.MINIO_ACCESS_KEY.strip(),
        secret_key=settings.MINIO_SECRET_KEY.strip(),
        secure=settings.MINIO_SECURE,  # keep false for http
    )


def ensure_bucket(minio: Minio, bucket: str) -> None:
    try:
        if not minio.bucket_exists(bucket):
            minio.make_bucket(bucket)
    except S3Error as e:
        raise RuntimeError(f"MinIO bucket ensure failed: {e}") from e
