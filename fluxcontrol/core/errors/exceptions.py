from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class AppError(Exception):
    code: str
    message: str
    http_status: int = 400
    detail: Any | None = None
    cause: Exception | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }
        if self.detail is not None:
            payload["error"]["detail"] = self.detail
        return payload


class StartupError(AppError):
    def __init__(self, message: str = "Startup failed", *, cause: Exception | None = None):
        super().__init__(code="STARTUP_FAILED", message=message, http_status=500, cause=cause)


class InvalidControlImageError(AppError):
    def __init__(self, message: str = "Control image is not valid base64 data", *, detail: Any | None = None):
        super().__init__(code="INVALID_CONTROL_IMAGE", message=message, http_status=422, detail=detail)


class StorageError(AppError):
    def __init__(self, message: str = "Storage request failed", *, detail: Any | None = None):
        super().__init__(code="STORAGE_FAILED", message=message, http_status=502, detail=detail)
