"""GeminiService 테스트 (가짜 genai 클라이언트 사용)

Run with: pytest tests/test_gemini_service.py -v
"""

import json
from io import BytesIO

import pytest
from PIL import Image

from makeover.models.exceptions import (
    GenerationStopped,
    MalformedResponse,
    NoImageReturned,
    ProviderBlocked,
    ProviderError,
    UnexpectedTextResponse,
    ValidationError,
)
from makeover.models.schemas import ColorPalette, DesignPlan, RoomDimensions
from makeover.services.gemini_service import extract_image, parse_json_response
from makeover.utils.images import decode_base64_image, detect_mime_type

from fakes import (
    blocked_response,
    candidate_response,
    image_part,
    rating,
    text_part,
    text_response,
)


# ============ Image Extraction Order ============

class TestExtractImage:

    def test_block_reason_is_reported_verbatim(self):
        response = blocked_response(block_reason="PROHIBITED_CONTENT")

        with pytest.raises(ProviderBlocked) as exc:
            extract_image(response)

        assert "PROHIBITED_CONTENT" in exc.value.message
        assert exc.value.message == "Request was blocked due to: PROHIBITED_CONTENT."

    def test_block_reason_wins_over_safety_ratings(self):
        response = blocked_response(
            block_reason="SAFETY",
            safety_ratings=[rating("HARM_CATEGORY_HARASSMENT", "HIGH")]
        )

        with pytest.raises(ProviderBlocked) as exc:
            extract_image(response)

        assert "HARM_CATEGORY_HARASSMENT" not in exc.value.message

    def test_safety_ratings_are_enumerated(self):
        response = blocked_response(safety_ratings=[
            rating("HARM_CATEGORY_HARASSMENT", "LOW"),
            rating("HARM_CATEGORY_DANGEROUS_CONTENT", "MEDIUM"),
        ])

        with pytest.raises(ProviderBlocked) as exc:
            extract_image(response)

        assert "HARM_CATEGORY_HARASSMENT: LOW" in exc.value.message
        assert "HARM_CATEGORY_DANGEROUS_CONTENT: MEDIUM" in exc.value.message

    def test_empty_response_without_feedback(self):
        with pytest.raises(ProviderBlocked) as exc:
            extract_image(blocked_response())

        assert "empty response" in exc.value.message

    def test_finish_reason_checked_before_image_part(self):
        response = candidate_response(parts=[image_part()], finish_reason="IMAGE_SAFETY")

        with pytest.raises(GenerationStopped) as exc:
            extract_image(response)

        assert "IMAGE_SAFETY" in exc.value.message

    def test_sdk_finish_reason_enum(self):
        from google.genai import types

        ok = candidate_response(parts=[image_part(b"img")], finish_reason=types.FinishReason.STOP)
        stopped = candidate_response(parts=[image_part(b"img")], finish_reason=types.FinishReason.MAX_TOKENS)

        assert extract_image(ok) == b"img"
        with pytest.raises(GenerationStopped) as exc:
            extract_image(stopped)
        assert exc.value.message.endswith("Reason: MAX_TOKENS")

    def test_first_image_part_wins(self):
        response = candidate_response(parts=[
            text_part("Here is your room"),
            image_part(b"first"),
            image_part(b"second"),
        ])

        assert extract_image(response) == b"first"

    def test_missing_finish_reason_still_returns_image(self):
        response = candidate_response(parts=[image_part(b"img")], finish_reason=None)

        assert extract_image(response) == b"img"

    def test_text_instead_of_image_is_truncated(self):
        long_text = "I cannot redesign this room because " + "x" * 300
        response = candidate_response(parts=[text_part(long_text)])

        with pytest.raises(UnexpectedTextResponse) as exc:
            extract_image(response)

        assert exc.value.preview == long_text[:100]
        assert long_text[:100] in exc.value.message
        assert long_text[:101] not in exc.value.message

    def test_no_image_and_no_text(self):
        with pytest.raises(NoImageReturned):
            extract_image(candidate_response(parts=[]))

    def test_candidate_without_content(self):
        with pytest.raises(NoImageReturned):
            extract_image(candidate_response(parts=None))


# ============ JSON Parsing ============

class TestParseJsonResponse:

    def test_plain_json(self):
        assert parse_json_response('  {"a": 1}  ') == {"a": 1}

    def test_markdown_code_fence(self):
        assert parse_json_response('```json\n[{"color": "Red", "accent": "Blue"}]\n```') == [
            {"color": "Red", "accent": "Blue"}
        ]

    def test_invalid_json(self):
        with pytest.raises(MalformedResponse):
            parse_json_response("not json at all")

    def test_empty_text(self):
        with pytest.raises(MalformedResponse):
            parse_json_response(None)


# ============ Design Ideas ============

class TestRequestDesignIdeas:

    @pytest.mark.asyncio
    async def test_returns_design_plan(self, gemini_service, fake_genai, plan_data, png_bytes):
        fake_genai.models.response = text_response(json.dumps(plan_data))

        plan = await gemini_service.request_design_ideas(
            png_bytes, "Scandinavian", RoomDimensions(width=12, length=14, unit="ft"), "living room"
        )

        assert isinstance(plan, DesignPlan)
        assert plan.furniture_suggestions[0].name == "Low Linen Sofa"
        assert plan.furniture_suggestions[1].model_url is None
        assert plan.estimated_cost.max == 4000

    @pytest.mark.asyncio
    async def test_request_shape(self, gemini_service, fake_genai, plan_data, png_bytes):
        fake_genai.models.response = text_response(json.dumps(plan_data))

        await gemini_service.request_design_ideas(
            png_bytes, "Scandinavian", RoomDimensions(width=4, length=5, unit="m"), "bedroom"
        )

        call = fake_genai.models.calls[0]
        image, prompt = call["contents"]
        assert call["model"] == "gemini-2.5-flash"
        assert image.inline_data.mime_type == "image/png"
        assert image.inline_data.data == png_bytes
        assert "4 meters wide by 5 meters long" in prompt
        assert call["config"].response_mime_type == "application/json"
        assert call["config"].temperature == 0.7
        assert "alternativePalettes" in call["config"].response_schema.required

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["furnitureSuggestions", "estimatedCost", "alternativePalettes"])
    async def test_missing_required_field(self, gemini_service, fake_genai, plan_data, png_bytes, field):
        del plan_data[field]
        fake_genai.models.response = text_response(json.dumps(plan_data))

        with pytest.raises(ValidationError) as exc:
            await gemini_service.request_design_ideas(png_bytes, "Boho", None, "bedroom")

        assert exc.value.missing_fields == [field]

    @pytest.mark.asyncio
    async def test_missing_item_fields_use_defaults(self, gemini_service, fake_genai, plan_data, png_bytes):
        del plan_data["furnitureSuggestions"][0]["estimatedPrice"]
        del plan_data["furnitureSuggestions"][1]["description"]
        del plan_data["estimatedCost"]["currency"]
        fake_genai.models.response = text_response(json.dumps(plan_data))

        plan = await gemini_service.request_design_ideas(png_bytes, "Boho", None, "bedroom")

        assert plan.furniture_suggestions[0].estimated_price == 0
        assert plan.furniture_suggestions[1].description == ""
        assert plan.estimated_cost.currency == "USD"

    @pytest.mark.asyncio
    async def test_null_required_field(self, gemini_service, fake_genai, plan_data, png_bytes):
        plan_data["estimatedCost"] = None
        fake_genai.models.response = text_response(json.dumps(plan_data))

        with pytest.raises(ValidationError):
            await gemini_service.request_design_ideas(png_bytes, "Boho", None, "bedroom")

    @pytest.mark.asyncio
    async def test_malformed_json(self, gemini_service, fake_genai, png_bytes):
        fake_genai.models.response = text_response('{"analysis": "cut off')

        with pytest.raises(MalformedResponse):
            await gemini_service.request_design_ideas(png_bytes, "Boho", None, "bedroom")

    @pytest.mark.asyncio
    async def test_provider_failure_is_wrapped(self, gemini_service, fake_genai, png_bytes):
        fake_genai.models.error = RuntimeError("429 RESOURCE_EXHAUSTED")

        with pytest.raises(ProviderError) as exc:
            await gemini_service.request_design_ideas(png_bytes, "Boho", None, "bedroom")

        assert exc.value.message == "429 RESOURCE_EXHAUSTED"
        assert exc.value.model == "gemini-2.5-flash"


# ============ Redesigned Image ============

class TestRequestRedesignedImage:

    @pytest.mark.asyncio
    async def test_returns_image_bytes(self, gemini_service, fake_genai, design_plan, png_bytes):
        fake_genai.models.response = candidate_response(parts=[image_part(b"new room")])

        image = await gemini_service.request_redesigned_image(
            design_plan, "Scandinavian", "living room", png_bytes,
            ColorPalette(color="Dusty Rose", accent="Deep Plum")
        )

        call = fake_genai.models.calls[0]
        assert image == b"new room"
        assert call["model"] == "gemini-2.5-flash-image-preview"
        assert call["config"].response_modalities == ["IMAGE", "TEXT"]
        assert "Dusty Rose with Deep Plum" in call["contents"][1]

    @pytest.mark.asyncio
    async def test_blocked_request(self, gemini_service, fake_genai, design_plan, png_bytes):
        fake_genai.models.response = blocked_response(block_reason="SAFETY")

        with pytest.raises(ProviderBlocked):
            await gemini_service.request_redesigned_image(design_plan, "Scandinavian", "bedroom", png_bytes)


# ============ More Palettes ============

class TestRequestMorePalettes:

    @pytest.mark.asyncio
    async def test_returns_palettes(self, gemini_service, fake_genai, design_plan):
        fake_genai.models.response = text_response(json.dumps([
            {"color": "Mist", "accent": "Slate"},
            {"color": "Butter Yellow", "accent": "Tangerine"},
            {"color": "Bone", "accent": "Oxblood"},
        ]))

        palettes = await gemini_service.request_more_palettes(design_plan, "mid-century modern")

        call = fake_genai.models.calls[0]
        assert [p.color for p in palettes] == ["Mist", "Butter Yellow", "Bone"]
        assert call["config"].temperature == 0.8
        assert call["config"].response_schema.items.required == ["color", "accent"]
        assert "- Warm Greige & Terracotta" in call["contents"][0]

    @pytest.mark.asyncio
    async def test_item_missing_accent(self, gemini_service, fake_genai, design_plan):
        fake_genai.models.response = text_response(json.dumps([{"color": "Mist"}]))

        with pytest.raises(ValidationError):
            await gemini_service.request_more_palettes(design_plan, "mid-century modern")

    @pytest.mark.asyncio
    async def test_not_an_array(self, gemini_service, fake_genai, design_plan):
        fake_genai.models.response = text_response('{"color": "Mist", "accent": "Slate"}')

        with pytest.raises(ValidationError):
            await gemini_service.request_more_palettes(design_plan, "mid-century modern")

    @pytest.mark.asyncio
    async def test_wrong_count_is_returned_as_is(self, gemini_service, fake_genai, design_plan):
        fake_genai.models.response = text_response(json.dumps([{"color": "Mist", "accent": "Slate"}]))

        palettes = await gemini_service.request_more_palettes(design_plan, "mid-century modern")

        assert len(palettes) == 1


# ============ Image Helpers ============

def test_decode_data_url(png_bytes, png_base64):
    assert decode_base64_image(f"data:image/png;base64,{png_base64}") == png_bytes
    assert decode_base64_image(png_base64) == png_bytes


def test_decode_invalid_base64():
    with pytest.raises(ValidationError):
        decode_base64_image("!!!not-base64!!!")


def test_detect_mime_type(png_bytes):
    assert detect_mime_type(png_bytes) == "image/png"
    assert detect_mime_type(b"definitely not an image") == "image/jpeg"


def _encode(fmt, **save_options):
    buffer = BytesIO()
    Image.new("RGB", (8, 8), color=(90, 120, 150)).save(buffer, format=fmt, **save_options)
    return buffer.getvalue()


def test_multi_picture_jpeg_is_sent_as_jpeg():
    second = Image.new("RGB", (8, 8), color=(10, 20, 30))
    mpo_bytes = _encode("MPO", save_all=True, append_images=[second])

    assert mpo_bytes.startswith(b"\xff\xd8")
    with Image.open(BytesIO(mpo_bytes)) as img:
        assert img.format == "MPO"
    assert detect_mime_type(mpo_bytes) == "image/jpeg"


@pytest.mark.parametrize("fmt", ["GIF", "BMP", "TIFF"])
def test_unsupported_formats_fall_back_to_jpeg(fmt):
    assert detect_mime_type(_encode(fmt)) == "image/jpeg"


def test_webp_passes_through():
    assert detect_mime_type(_encode("WEBP")) == "image/webp"
