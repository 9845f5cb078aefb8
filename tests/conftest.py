"""테스트 공통 설정 및 fixture"""
import base64
import copy
import os
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# settings 모듈이 import 시점에 API 키를 요구하므로 먼저 설정
os.environ.setdefault("GEMINI_API_KEY", "test-key")

from makeover.config import Settings
from makeover.main import create_app
from makeover.models.schemas import DesignPlan
from makeover.services.gemini_service import GeminiService

from fakes import FakeGenaiClient


SAMPLE_PLAN = {
    "analysis": "A bright living room with a large window and dated furniture.",
    "designRationale": "Warm neutrals and natural wood balance the strong daylight.",
    "wallColor": {"color": "Soft Off-White", "accent": "Sage Green"},
    "lighting": "A large arched floor lamp and warm recessed lights",
    "flooring": "Light oak hardwood with a wool area rug",
    "furnitureSuggestions": [
        {
            "name": "Low Linen Sofa",
            "description": "A deep-seated sofa in oatmeal linen.",
            "placement": "Facing the window",
            "estimatedPrice": 1200,
            "modelUrl": "https://models.example.com/linen_sofa.gltf",
        },
        {
            "name": "Oak Coffee Table",
            "description": "A round solid oak table.",
            "placement": "Centered in front of the sofa",
            "estimatedPrice": 350,
            "modelUrl": None,
        },
    ],
    "estimatedCost": {"min": 2500, "max": 4000, "currency": "USD"},
    "alternativePalettes": [
        {"color": "Warm Greige", "accent": "Terracotta"},
        {"color": "Pale Blue", "accent": "Navy"},
        {"color": "Ivory", "accent": "Charcoal"},
    ],
}


@pytest.fixture
def plan_data():
    return copy.deepcopy(SAMPLE_PLAN)


@pytest.fixture
def design_plan(plan_data):
    return DesignPlan.model_validate(plan_data)


@pytest.fixture
def png_bytes():
    buffer = BytesIO()
    Image.new("RGB", (8, 8), color=(200, 180, 160)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_base64(png_bytes):
    return base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def test_settings():
    return Settings(gemini_api_key="test-key", _env_file=None)


@pytest.fixture
def fake_genai():
    return FakeGenaiClient()


@pytest.fixture
def gemini_service(test_settings, fake_genai):
    return GeminiService(test_settings, client=fake_genai)


@pytest.fixture
def app(test_settings, gemini_service):
    return create_app(test_settings, gemini_service=gemini_service)


@pytest.fixture
def client(app):
    return TestClient(app)
