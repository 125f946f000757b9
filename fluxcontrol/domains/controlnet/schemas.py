from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ControlType(str, Enum):
    CANNY = "canny"
    DEPTH = "depth"
    SOFT_EDGE = "soft_edge"


class DepthPreprocessor(str, Enum):
    MIDAS = "Midas"
    ZOE = "Zoe"
    DEPTH_ANYTHING = "DepthAnything"
    ZOE_DEPTH_ANYTHING = "Zoe-DepthAnything"


class OutputFormat(str, Enum):
    WEBP = "webp"
    JPG = "jpg"
    PNG = "png"


class SoftEdgePreprocessor(str, Enum):
    HED = "HED"
    TEED = "TEED"
    PIDINET = "PiDiNet"


class ControlNetOptions(BaseModel):
    """Optional inputs of xlabs-ai/flux-dev-controlnet.

    Ranges and defaults are the ones Replicate documents for the model. They are
    applied by Replicate, not here: a field left as None is dropped from the
    payload so the remote default wins.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    control_strength: float | None = Field(
        default=None,
        description=(
            "Strength of control net. Canny works best with 0.5, soft edge with 0.4, "
            "depth between 0.5 and 0.75. Default 0.5, range 0 to 3."
        ),
    )
    control_type: ControlType | None = Field(default=None, description="Type of control net. Default depth.")
    depth_preprocessor: DepthPreprocessor | None = Field(
        default=None,
        description="Preprocessor to use with depth control net. Default DepthAnything.",
    )
    guidance_scale: float | None = Field(default=None, description="Guidance scale. Default 3.5, range 0 to 5.")
    image_to_image_strength: float | None = Field(
        default=None,
        description=(
            "Strength of image to image control. 0 uses none of the control image, 1 returns it as is. "
            "Try 0 to 0.25. Default 0, range 0 to 1."
        ),
    )
    lora_strength: float | None = Field(default=None, description="Strength of LoRA model. Default 1, range -1 to 3.")
    lora_url: str | None = Field(
        default=None,
        description="HuggingFace .safetensors file, Replicate .tar file or CivitAI download link.",
    )
    negative_prompt: str | None = Field(default=None, description="Things you do not want to see in your image.")
    output_format: OutputFormat | None = Field(default=None, description="Format of the output images.")
    output_quality: int | None = Field(
        default=None,
        description="Quality of the output images, 100 is best. Default 80, range 0 to 100.",
    )
    return_preprocessed_image: bool | None = Field(
        default=None,
        description="Return the preprocessed control image. Default false.",
    )
    seed: int | None = Field(default=None, description="Seed for reproducibility. Random by default.")
    soft_edge_preprocessor: SoftEdgePreprocessor | None = Field(
        default=None,
        description="Preprocessor to use with soft edge control net.",
    )
    steps: int | None = Field(default=None, description="Number of steps. Default 28, range 1 to 50.")


class ControlNetGenerationRequest(ControlNetOptions):
    """Input of one flux-dev-controlnet prediction.

    The two required fields may be passed positionally::

        ControlNetGenerationRequest("https://example.com/guide.png", "a castle at dusk", steps=40)
    """

    control_image: str = Field(..., min_length=1, description="Image to use with control net.")
    prompt: str = Field(..., min_length=1, description="Input prompt.")

    def __init__(self, control_image: str | None = None, prompt: str | None = None, /, **data: Any) -> None:
        for name, value in (("control_image", control_image), ("prompt", prompt)):
            if value is None:
                continue
            if name in data:
                raise TypeError(f"{type(self).__name__}() got multiple values for argument '{name}'")
            data[name] = value
        super().__init__(**data)

    def to_input(self) -> dict[str, Any]:
        """Wire form of the request: only supplied fields, enums as their tokens.

        The required keys come first, options follow in declaration order.
        """
        options = self.model_dump(mode="json", exclude_none=True, exclude={"control_image", "prompt"})
        return {"control_image": self.control_image, "prompt": self.prompt, **options}


class ControlNetToR2Request(ControlNetOptions):
    control_image_base64: str = Field(..., min_length=1, description="Control image bytes, base64 encoded.")
    content_type: str = Field(default="image/png", min_length=1, max_length=128)
    prompt: str = Field(..., min_length=1)
    key: str | None = Field(default=None, min_length=1, max_length=1024)

    def options(self) -> dict[str, Any]:
        return self.model_dump(include=set(ControlNetOptions.model_fields), exclude_none=True)


class ControlNetInputResponse(BaseModel):
    model: str
    input: dict[str, Any]
