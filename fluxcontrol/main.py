import os
from pathlib import Path

import uvicorn
from fastapi import FastAPI

# Load project-root .env if present.
# Note: Uvicorn does not automatically load it unless started with --env-file.
_env_path = Path(__file__).resolve().parents[1] / ".env"
if _env_path.exists():
    from dotenv import load_dotenv

    # Prefer .env values over inherited shell env vars for local runs.
    load_dotenv(dotenv_path=_env_path, override=True)

from fluxcontrol.core.config import Settings
from fluxcontrol.core.errors.handlers import register_exception_handlers
from fluxcontrol.core.storage.r2 import ControlImageBucket
from fluxcontrol.domains.controlnet.router import router as controlnet_router
from fluxcontrol.lifespan import lifespan


def create_app(*, settings: Settings | None = None, r2: ControlImageBucket | None = None) -> FastAPI:
    app = FastAPI(title="Flux ControlNet Input Server", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.r2 = r2

    register_exception_handlers(app)

    app.include_router(controlnet_router, prefix="/v1")

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    @app.get("/readyz")
    async def readyz():
        settings = getattr(app.state, "settings", None)
        return {
            "server_ready": settings is not None,
            "replicate_model": settings.replicate_model if settings is not None else None,
            "r2_ready": getattr(app.state, "r2", None) is not None,
        }

    return app


app = create_app()


def run() -> None:
    host = (os.getenv("HOST") or "0.0.0.0").strip()
    try:
        port = int((os.getenv("PORT") or "8000").strip())
    except ValueError:
        port = 8000
    uvicorn.run("fluxcontrol.main:app", host=host, port=port)


if __name__ == "__main__":
    run()
