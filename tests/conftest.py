from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from fluxcontrol.core.config import Settings
from fluxcontrol.main import create_app


@pytest.fixture
def settings():
    return Settings(control_image_prefix="uploads/", presign_expires_in=600)


@pytest.fixture
def presigned_url():
    return "https://bucket.example.r2.cloudflarestorage.com/uploads/guide.png?X-Amz-Signature=abc"


@pytest.fixture
def fake_r2(presigned_url):
    """ControlImageBucket stand-in that records uploads and hands back a fixed URL."""
    r2 = MagicMock()
    r2.bucket = "controlnet-test"
    r2.put_control_image.return_value = presigned_url
    return r2


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings=settings)) as c:
        yield c


@pytest.fixture
def r2_client(settings, fake_r2):
    with TestClient(create_app(settings=settings, r2=fake_r2)) as c:
        yield c
