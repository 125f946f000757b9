from __future__ import annotations

import os

from pydantic import BaseModel, Field


DEFAULT_REPLICATE_MODEL = "xlabs-ai/flux-dev-controlnet"


def _normalize_prefix(prefix: str) -> str:
    prefix = (prefix or "").strip()
    if not prefix:
        return ""
    # Allow either "controlnet/in" or "controlnet/in/".
    if not prefix.endswith("/"):
        prefix += "/"
    return prefix.lstrip("/")


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw)
    except ValueError:
        return default


class Settings(BaseModel):
    replicate_model: str = DEFAULT_REPLICATE_MODEL
    control_image_prefix: str = ""
    presign_expires_in: int = Field(default=86400, ge=1)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        replicate_model = (os.getenv("REPLICATE_MODEL") or "").strip() or DEFAULT_REPLICATE_MODEL

        expires_in = _env_int("CONTROL_IMAGE_URL_EXPIRES_IN", 86400)
        if expires_in < 1:
            expires_in = 86400

        return cls(
            replicate_model=replicate_model,
            control_image_prefix=_normalize_prefix(os.getenv("CONTROL_IMAGE_REMOTE_PREFIX", "")),
            presign_expires_in=expires_in,
            log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
        )
