from __future__ import annotations

from fastapi import APIRouter, Request

from fluxcontrol.domains.controlnet.schemas import (
    ControlNetGenerationRequest,
    ControlNetInputResponse,
    ControlNetToR2Request,
)
from fluxcontrol.domains.controlnet.service import build_prediction_body, build_prediction_body_with_r2

router = APIRouter(tags=["controlnet"])


@router.post("/controlnet/input", response_model=ControlNetInputResponse)
async def controlnet_input_endpoint(request: Request, payload: ControlNetGenerationRequest):
    return build_prediction_body(payload, settings=request.app.state.settings)


@router.post("/r2/controlnet/input", response_model=ControlNetInputResponse)
async def controlnet_input_r2_endpoint(request: Request, payload: ControlNetToR2Request):
    return await build_prediction_body_with_r2(request, payload)
