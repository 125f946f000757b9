"""
/v1/controlnet routes and the payload service behind them.
"""
import base64

import pytest
from fluxcontrol.core.config import Settings
from fluxcontrol.core.errors.exceptions import InvalidControlImageError, StorageError
from fluxcontrol.domains.controlnet.schemas import ControlNetGenerationRequest
from fluxcontrol.domains.controlnet.service import build_prediction_body, decode_control_image

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-data"
PNG_B64 = base64.b64encode(PNG_BYTES).decode("ascii")


class TestBuildPredictionBody:
    """Prediction body envelope"""

    def test_wraps_input_with_model(self):
        request = ControlNetGenerationRequest("https://example.com/guide.png", "a castle at dusk")
        body = build_prediction_body(request, settings=Settings(replicate_model="acme/controlnet"))
        assert body == {
            "model": "acme/controlnet",
            "input": {"control_image": "https://example.com/guide.png", "prompt": "a castle at dusk"},
        }


class TestDecodeControlImage:
    """Base64 control image decoding"""

    def test_plain_base64(self):
        assert decode_control_image(PNG_B64) == PNG_BYTES

    def test_data_url(self):
        assert decode_control_image(f"data:image/png;base64,{PNG_B64}") == PNG_BYTES

    def test_invalid_base64(self):
        with pytest.raises(InvalidControlImageError) as excinfo:
            decode_control_image("not base64!!")
        assert excinfo.value.http_status == 422

    def test_empty_payload(self):
        with pytest.raises(InvalidControlImageError):
            decode_control_image("data:image/png;base64,")


class TestControlNetInputEndpoint:
    """POST /v1/controlnet/input"""

    def test_required_only(self, client):
        resp = client.post(
            "/v1/controlnet/input",
            json={"control_image": "https://example.com/guide.png", "prompt": "a castle at dusk"},
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "model": "xlabs-ai/flux-dev-controlnet",
            "input": {"control_image": "https://example.com/guide.png", "prompt": "a castle at dusk"},
        }

    def test_optional_fields_pass_through(self, client):
        resp = client.post(
            "/v1/controlnet/input",
            json={
                "control_image": "https://example.com/guide.png",
                "prompt": "a castle at dusk",
                "steps": 40,
                "output_format": "png",
                "control_type": "soft_edge",
                "seed": None,
            },
        )
        assert resp.status_code == 200
        assert resp.json()["input"] == {
            "control_image": "https://example.com/guide.png",
            "prompt": "a castle at dusk",
            "steps": 40,
            "output_format": "png",
            "control_type": "soft_edge",
        }

    def test_nan_is_rejected(self, client):
        resp = client.post(
            "/v1/controlnet/input",
            content='{"control_image": "https://example.com/guide.png", "prompt": "a castle at dusk", "guidance_scale": NaN}',
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "INVALID_REQUEST"
        assert resp.json()["error"]["detail"][0]["loc"] == ["body", "guidance_scale"]

    def test_missing_prompt(self, client):
        resp = client.post("/v1/controlnet/input", json={"control_image": "https://example.com/guide.png"})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "INVALID_REQUEST"

    def test_unknown_preprocessor(self, client):
        resp = client.post(
            "/v1/controlnet/input",
            json={
                "control_image": "https://example.com/guide.png",
                "prompt": "a castle at dusk",
                "depth_preprocessor": "zoe-depthanything",
            },
        )
        assert resp.status_code == 422


class TestControlNetInputR2Endpoint:
    """POST /v1/r2/controlnet/input"""

    def test_r2_not_enabled(self, client):
        resp = client.post(
            "/v1/r2/controlnet/input",
            json={"control_image_base64": PNG_B64, "prompt": "a castle at dusk"},
        )
        assert resp.status_code == 500
        assert resp.json()["error"]["code"] == "R2_NOT_ENABLED"

    def test_uploads_and_uses_presigned_url(self, r2_client, fake_r2, presigned_url):
        resp = r2_client.post(
            "/v1/r2/controlnet/input",
            json={
                "control_image_base64": PNG_B64,
                "prompt": "a castle at dusk",
                "control_type": "canny",
                "key": "guide.png",
            },
        )
        assert resp.status_code == 200
        assert resp.json()["input"] == {
            "control_image": presigned_url,
            "prompt": "a castle at dusk",
            "control_type": "canny",
        }

        fake_r2.put_control_image.assert_called_once_with(
            key="uploads/guide.png", data=PNG_BYTES, content_type="image/png", expires_in=600
        )

    def test_default_key_uses_content_type(self, r2_client, fake_r2):
        resp = r2_client.post(
            "/v1/r2/controlnet/input",
            json={"control_image_base64": PNG_B64, "prompt": "a castle at dusk", "content_type": "image/webp"},
        )
        assert resp.status_code == 200
        key = fake_r2.put_control_image.call_args.kwargs["key"]
        assert key.startswith("uploads/controlnet/inputs/")
        assert key.endswith(".webp")

    def test_invalid_image(self, r2_client, fake_r2):
        resp = r2_client.post(
            "/v1/r2/controlnet/input",
            json={"control_image_base64": "%%%", "prompt": "a castle at dusk"},
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "INVALID_CONTROL_IMAGE"
        fake_r2.put_control_image.assert_not_called()

    def test_storage_failure(self, r2_client, fake_r2):
        fake_r2.put_control_image.side_effect = StorageError(detail={"key": "uploads/guide.png"})
        resp = r2_client.post(
            "/v1/r2/controlnet/input",
            json={"control_image_base64": PNG_B64, "prompt": "a castle at dusk"},
        )
        assert resp.status_code == 502
        assert resp.json()["error"]["code"] == "STORAGE_FAILED"


class TestHealth:
    def test_healthz(self, client):
        assert client.get("/healthz").json() == {"status": "ok"}

    def test_readyz(self, r2_client):
        assert r2_client.get("/readyz").json() == {
            "server_ready": True,
            "replicate_model": "xlabs-ai/flux-dev-controlnet",
            "r2_ready": True,
        }
