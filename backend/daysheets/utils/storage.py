"""S3-compatible object storage for tour documents (R2, S3, MinIO)."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

import boto3
from botocore.config import Config

from daysheets.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Object storage call failed."""


class StorageConfig:
    def __init__(self) -> None:
        self.bucket = settings.STORAGE_BUCKET
        self.endpoint_url = settings.STORAGE_ENDPOINT_URL or None
        self.access_key_id = settings.STORAGE_ACCESS_KEY_ID or None
        self.secret_access_key = settings.STORAGE_SECRET_ACCESS_KEY or None
        self.region = settings.STORAGE_REGION or "auto"
        self.download_ttl_seconds = settings.SIGNED_URL_TTL


def _client(cfg: StorageConfig):
    """Create an S3 client.

    - signature_version s3v4 (required for presigned URLs)
    - path-style addressing so R2/MinIO endpoints work unchanged
    """
    return boto3.client(
        "s3",
        aws_access_key_id=cfg.access_key_id,
        aws_secret_access_key=cfg.secret_access_key,
        endpoint_url=cfg.endpoint_url,
        region_name=cfg.region,
        config=Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
        ),
    )


def build_document_key(project_id: str) -> str:
    """Key format: project/{project_id}/{uuid}.pdf

    Only PDFs are stored, so the suffix is fixed and the client's filename
    never reaches the key.
    """
    return f"project/{project_id}/{uuid.uuid4()}.pdf"


def upload_object(key: str, data: bytes, content_type: str) -> None:
    cfg = StorageConfig()
    try:
        _client(cfg).put_object(Bucket=cfg.bucket, Key=key, Body=data, ContentType=content_type)
    except Exception as exc:
        logger.error("Storage upload failed for %s: %s", key, exc, exc_info=True)
        raise StorageError(f"Upload failed: {exc}") from exc


def delete_object(key: str) -> None:
    cfg = StorageConfig()
    try:
        _client(cfg).delete_object(Bucket=cfg.bucket, Key=key)
    except Exception as exc:
        raise StorageError(f"Delete failed: {exc}") from exc


def presign_get(key: str, expires_in: Optional[int] = None) -> str:
    """Return a time-boxed GET URL for ``key``."""
    cfg = StorageConfig()
    ttl = expires_in or cfg.download_ttl_seconds
    try:
        return _client(cfg).generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": cfg.bucket, "Key": key},
            ExpiresIn=ttl,
        )
    except Exception as exc:
        logger.error("Could not presign %s: %s", key, exc, exc_info=True)
        raise StorageError(f"Could not sign URL: {exc}") from exc
