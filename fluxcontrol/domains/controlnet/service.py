from __future__ import annotations

import base64
import binascii
import uuid
from functools import partial
from typing import Any

import anyio
from fastapi import Request

from fluxcontrol.core.config import Settings
from fluxcontrol.core.errors.exceptions import AppError, InvalidControlImageError
from fluxcontrol.core.storage.r2 import ControlImageBucket
from fluxcontrol.domains.controlnet.schemas import ControlNetGenerationRequest, ControlNetToR2Request

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
}


def build_prediction_body(payload: ControlNetGenerationRequest, *, settings: Settings) -> dict[str, Any]:
    return {"model": settings.replicate_model, "input": payload.to_input()}


def decode_control_image(data: str) -> bytes:
    raw = (data or "").strip()
    # Accept data URLs as produced by browsers: "data:image/png;base64,...."
    if raw.startswith("data:") and "," in raw:
        raw = raw.split(",", 1)[1]

    try:
        decoded = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidControlImageError(detail={"error": str(exc)}) from exc

    if not decoded:
        raise InvalidControlImageError("Control image is empty")
    return decoded


def _apply_prefix(*, prefix: str, key: str) -> str:
    key = (key or "").lstrip("/")
    if not prefix or key.startswith(prefix):
        return key
    return f"{prefix}{key}"


def _default_key(content_type: str) -> str:
    ext = _EXTENSIONS.get(content_type.strip().lower(), "bin")
    return f"controlnet/inputs/{uuid.uuid4()}.{ext}"


async def upload_control_image(r2: ControlImageBucket, payload: ControlNetToR2Request, *, settings: Settings) -> str:
    """Upload the base64 control image and return a presigned URL Replicate can fetch."""
    data = decode_control_image(payload.control_image_base64)
    key = _apply_prefix(
        prefix=settings.control_image_prefix,
        key=payload.key or _default_key(payload.content_type),
    )

    # boto3 is sync; run in worker thread.
    return await anyio.to_thread.run_sync(
        partial(
            r2.put_control_image,
            key=key,
            data=data,
            content_type=payload.content_type,
            expires_in=settings.presign_expires_in,
        )
    )


async def build_prediction_body_with_r2(request: Request, payload: ControlNetToR2Request) -> dict[str, Any]:
    r2 = getattr(request.app.state, "r2", None)
    if r2 is None:
        raise AppError(code="R2_NOT_ENABLED", message="Cloudflare R2 is not enabled", http_status=500)

    settings: Settings = request.app.state.settings
    url = await upload_control_image(r2, payload, settings=settings)
    generation = ControlNetGenerationRequest(url, payload.prompt, **payload.options())
    return build_prediction_body(generation, settings=settings)
