from __future__ import annotations

import logging
import os

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from fluxcontrol.core.errors.exceptions import AppError, StorageError

logger = logging.getLogger(__name__)

# Env var -> ControlImageBucket constructor argument.
_REQUIRED_ENV = {
    "R2_ACCESS_KEY_ID": "access_key_id",
    "R2_SECRET_ACCESS_KEY": "secret_access_key",
    "R2_BUCKET_NAME": "bucket",
}


def r2_enabled_from_env() -> bool:
    return (os.getenv("R2_ENABLED") or "").strip().lower() in {"1", "true", "yes", "y", "on"}


def r2_endpoint_from_env() -> str:
    endpoint = (os.getenv("R2_ENDPOINT_URL") or "").strip()
    if endpoint:
        return endpoint
    account_id = (os.getenv("R2_ACCOUNT_ID") or "").strip()
    return f"https://{account_id}.r2.cloudflarestorage.com" if account_id else ""


class ControlImageBucket:
    """R2 bucket that holds control images for Replicate to fetch by presigned URL."""

    def __init__(self, *, endpoint_url: str, access_key_id: str, secret_access_key: str, bucket: str) -> None:
        self.endpoint_url = endpoint_url
        self.bucket = bucket
        self.client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=Config(signature_version="s3v4"),
        )

    @classmethod
    def from_env(cls) -> "ControlImageBucket":
        values = {arg: (os.getenv(name) or "").strip() for name, arg in _REQUIRED_ENV.items()}
        endpoint_url = r2_endpoint_from_env()

        missing = [name for name, arg in _REQUIRED_ENV.items() if not values[arg]]
        if not endpoint_url:
            missing.insert(0, "R2_ACCOUNT_ID (or R2_ENDPOINT_URL)")
        if missing:
            raise AppError(
                code="R2_CONFIG_MISSING",
                message="Missing Cloudflare R2 configuration",
                http_status=500,
                detail={"missing": missing},
            )

        return cls(endpoint_url=endpoint_url, **values)

    def put_control_image(self, *, key: str, data: bytes, content_type: str, expires_in: int) -> str:
        """Store the image under `key` and return a GET URL valid for `expires_in` seconds."""
        if expires_in < 1:
            raise ValueError("expires_in must be >= 1")

        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
            url = self.client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError("Failed to upload control image", detail={"key": key, "error": str(exc)}) from exc

        logger.info("Stored control image: bucket=%s key=%s bytes=%d", self.bucket, key, len(data))
        return url
