import asyncio
import json
from typing import Any, List, Optional

from google import genai
from google.genai import types
from pydantic import ValidationError as SchemaError

from ..config import Settings
from ..models.exceptions import (
    GenerationStopped,
    MalformedResponse,
    NoImageReturned,
    ProviderBlocked,
    ProviderError,
    UnexpectedTextResponse,
    ValidationError,
)
from ..models.schemas import ColorPalette, DesignPlan, RoomDimensions
from ..utils.images import detect_mime_type
from ..utils.logger import logger
from . import prompts

# 응답에 반드시 있어야 하는 필드 (스키마 required 를 무시하는 응답 대비)
DESIGN_PLAN_CRITICAL_FIELDS = ("furnitureSuggestions", "estimatedCost", "alternativePalettes")

EMPTY_RESPONSE_MESSAGE = (
    "The AI returned an empty response, which could be due to a safety filter or a temporary issue."
)


def _enum_text(value: Any) -> str:
    """SDK enum(FinishReason 등)과 문자열을 같은 형태로"""
    return str(getattr(value, "value", value))


def _strip_code_fence(text: str) -> str:
    """JSON 추출 (마크다운 코드 블록 처리)"""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_json_response(text: Optional[str]) -> Any:
    if not text:
        raise MalformedResponse("response contained no text")
    cleaned = _strip_code_fence(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedResponse(str(e), raw_text=cleaned)


def validate_design_plan(data: Any) -> DesignPlan:
    """파싱된 JSON 을 DesignPlan 으로 검증"""
    if not isinstance(data, dict):
        raise ValidationError(f"AI response must be a JSON object, got {type(data).__name__}.")

    missing = [field for field in DESIGN_PLAN_CRITICAL_FIELDS if data.get(field) is None]
    if missing:
        raise ValidationError(
            "AI response is missing required fields like 'furnitureSuggestions', "
            f"'estimatedCost', or 'alternativePalettes'. Missing: {', '.join(missing)}",
            missing_fields=missing
        )

    try:
        return DesignPlan.model_validate(data)
    except SchemaError as e:
        raise ValidationError(f"AI response does not match the design plan format: {e}")


def validate_palettes(data: Any) -> List[ColorPalette]:
    """팔레트 배열 검증 (color, accent 필수, 개수는 경고만)"""
    if not isinstance(data, list):
        raise ValidationError(f"AI response must be a JSON array of palettes, got {type(data).__name__}.")

    palettes = []
    for index, item in enumerate(data):
        if not isinstance(item, dict) or item.get("color") is None or item.get("accent") is None:
            raise ValidationError(
                f"AI response palette #{index + 1} is missing required fields 'color' or 'accent'.",
                missing_fields=["color", "accent"]
            )
        palettes.append(ColorPalette(color=str(item["color"]), accent=str(item["accent"])))

    if len(palettes) != 3:
        logger.warning(f"Expected 3 palettes, model returned {len(palettes)}")
    return palettes


def extract_image(response: Any) -> bytes:
    """이미지 생성 응답에서 이미지 bytes 추출

    판정 순서 (각 단계에서 종료):
    1. candidate 없음 -> ProviderBlocked
    2. finish reason 이 STOP 이 아님 -> GenerationStopped
    3. inline_data 가 있는 첫 part -> 이미지 반환
    4. 텍스트 part 만 있음 -> UnexpectedTextResponse
    5. 그 외 -> NoImageReturned
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None) if feedback else None
        ratings = (getattr(feedback, "safety_ratings", None) or []) if feedback else []

        if block_reason:
            reason = _enum_text(block_reason)
            raise ProviderBlocked(f"Request was blocked due to: {reason}.", block_reason=reason)
        if ratings:
            summary = ", ".join(
                f"{_enum_text(r.category)}: {_enum_text(r.probability)}" for r in ratings
            )
            raise ProviderBlocked(f"Request may have been blocked by safety filters. Ratings: {summary}")
        raise ProviderBlocked(EMPTY_RESPONSE_MESSAGE)

    candidate = candidates[0]
    finish_reason = getattr(candidate, "finish_reason", None)
    if finish_reason and _enum_text(finish_reason) != types.FinishReason.STOP.value:
        raise GenerationStopped(_enum_text(finish_reason))

    content = getattr(candidate, "content", None)
    parts = (getattr(content, "parts", None) or []) if content else []
    for part in parts:
        inline_data = getattr(part, "inline_data", None)
        if inline_data and inline_data.data:
            return inline_data.data

    text = "".join(getattr(part, "text", None) or "" for part in parts)
    if text:
        logger.warning(f"AI responded with text instead of an image: {text[:200]}")
        raise UnexpectedTextResponse(text)

    raise NoImageReturned()


class GeminiService:
    """Google Gemini API 서비스"""

    def __init__(self, config: Settings, client: Optional[genai.Client] = None):
        if not config.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is not configured.")

        self.config = config
        self.client = client or genai.Client(api_key=config.gemini_api_key)

        logger.info(
            f"GeminiService initialized (text={config.gemini_text_model}, image={config.gemini_image_model})"
        )

    async def _generate(self, model: str, contents: list, config: types.GenerateContentConfig) -> Any:
        """SDK 호출 (동기 API 를 스레드에서 실행)"""
        try:
            return await asyncio.to_thread(
                self.client.models.generate_content,
                model=model,
                contents=contents,
                config=config,
            )
        except Exception as e:
            logger.error(f"Gemini call failed ({model}): {type(e).__name__}: {str(e)}", exc_info=True)
            raise ProviderError(str(e), model=model) from e

    async def request_design_ideas(
        self,
        image: bytes,
        style: str,
        dimensions: Optional[RoomDimensions],
        room_type: str
    ) -> DesignPlan:
        """방 사진 분석 + 디자인 플랜 생성 (JSON mode)"""
        logger.info(f"Generating design ideas: style={style}, room_type={room_type}")

        contents = [
            types.Part.from_bytes(data=image, mime_type=detect_mime_type(image)),
            prompts.build_design_ideas_prompt(style, room_type, dimensions),
        ]
        response = await self._generate(
            self.config.gemini_text_model,
            contents,
            types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=prompts.DESIGN_PLAN_SCHEMA,
                temperature=self.config.design_temperature,
            ),
        )

        plan = validate_design_plan(parse_json_response(response.text))
        logger.info(
            f"Design plan generated: {len(plan.furniture_suggestions)} items, "
            f"{len(plan.alternative_palettes)} alternative palettes"
        )
        return plan

    async def request_redesigned_image(
        self,
        plan: DesignPlan,
        style: str,
        room_type: str,
        image: bytes,
        override_colors: Optional[ColorPalette] = None
    ) -> bytes:
        """디자인 플랜이 적용된 이미지 생성"""
        logger.info(
            f"Generating redesigned image: style={style}, room_type={room_type}, "
            f"override_colors={override_colors is not None}"
        )

        contents = [
            types.Part.from_bytes(data=image, mime_type=detect_mime_type(image)),
            prompts.build_redesign_prompt(plan, style, room_type, override_colors),
        ]
        response = await self._generate(
            self.config.gemini_image_model,
            contents,
            types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
        )

        try:
            image_data = extract_image(response)
        except (ProviderBlocked, GenerationStopped, UnexpectedTextResponse, NoImageReturned) as e:
            logger.error(f"Image generation failed: {type(e).__name__}: {e.message}")
            raise

        logger.info(f"Redesigned image generated ({len(image_data)} bytes)")
        return image_data

    async def request_more_palettes(self, plan: DesignPlan, style: str) -> List[ColorPalette]:
        """기존과 겹치지 않는 팔레트 3개 생성"""
        logger.info(f"Generating more palettes: style={style}")

        response = await self._generate(
            self.config.gemini_text_model,
            [prompts.build_more_palettes_prompt(plan, style)],
            types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=prompts.MORE_PALETTES_SCHEMA,
                temperature=self.config.palette_temperature,
            ),
        )

        palettes = validate_palettes(parse_json_response(response.text))
        logger.info(f"Generated {len(palettes)} palettes")
        return palettes
