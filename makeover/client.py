"""프론트엔드용 API 클라이언트

서버의 /api/generate 엔드포인트를 감싸는 비동기 함수 모음.
서버 설정(GEMINI_API_KEY 등)은 import 하지 않는다.

사용법:
    plan = await generate_design_ideas(base64_image, "Scandinavian", None, "living room")
    image = await generate_redesigned_image(plan, "Scandinavian", "living room", base64_image)
"""

import logging
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError as SchemaError

from .models.schemas import Action, ColorPalette, DesignPlan, RoomDimensions

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_ENDPOINT = "/api/generate"

SAFETY_FILTER_MESSAGE = "The request was blocked by a safety filter. Please modify your prompt or image."
PARSE_ERROR_MESSAGE = "Failed to parse error response"


class DesignApiError(Exception):
    """사용자에게 보여줄 최종 오류 메시지"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def user_friendly_error(error: Optional[str]) -> str:
    """안전 필터 차단은 고정 문구, 그 외는 원문 앞에 안내 문구"""
    if error and "safety" in error:
        return SAFETY_FILTER_MESSAGE
    return f"An error occurred: {error or 'Unknown server error'}"


class DesignApiClient:
    """/api/generate 호출 클라이언트"""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        endpoint: str = DEFAULT_ENDPOINT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 120.0
    ):
        self.base_url = base_url.rstrip('/')
        self.endpoint = endpoint
        self.transport = transport
        self.timeout = timeout

    async def call_api(self, action: Action, payload: dict) -> Any:
        """{action, payload} 전송 후 결과 반환, 실패 시 DesignApiError"""
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                transport=self.transport,
                timeout=self.timeout
            ) as client:
                response = await client.post(
                    self.endpoint,
                    json={"action": action.value, "payload": payload},
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as e:
            logger.error(f"API request failed: {type(e).__name__}: {e}")
            raise DesignApiError(user_friendly_error(str(e) or type(e).__name__)) from e

        if not response.is_success:
            try:
                error = response.json().get("error")
            except (ValueError, AttributeError):
                error = PARSE_ERROR_MESSAGE
            logger.error(f"API Error ({response.status_code}): {error}")
            raise DesignApiError(user_friendly_error(error), status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON in API response: {e}")
            raise DesignApiError(user_friendly_error(f"Invalid response from server: {e}"),
                                 status_code=response.status_code) from e

    async def generate_design_ideas(
        self,
        base64_image: str,
        style: str,
        dimensions: Optional[RoomDimensions],
        room_type: str
    ) -> DesignPlan:
        result = await self.call_api(Action.GENERATE_DESIGN_IDEAS, {
            "base64Image": base64_image,
            "style": style,
            "dimensions": dimensions.to_json_dict() if dimensions else None,
            "roomType": room_type,
        })
        try:
            return DesignPlan.model_validate(result)
        except SchemaError as e:
            raise DesignApiError(user_friendly_error(f"Unexpected design plan format: {e}")) from e

    async def generate_redesigned_image(
        self,
        design_plan: DesignPlan,
        style: str,
        room_type: str,
        base64_image: str,
        new_colors: Optional[ColorPalette] = None
    ) -> str:
        """base64 인코딩된 이미지 문자열 반환"""
        return await self.call_api(Action.GENERATE_REDESIGNED_IMAGE, {
            "designPlan": design_plan.to_json_dict(),
            "style": style,
            "roomType": room_type,
            "base64Image": base64_image,
            "newColors": new_colors.to_json_dict() if new_colors else None,
        })

    async def generate_more_palettes(self, design_plan: DesignPlan, style: str) -> List[ColorPalette]:
        result = await self.call_api(Action.GENERATE_MORE_PALETTES, {
            "designPlan": design_plan.to_json_dict(),
            "style": style,
        })
        try:
            return [ColorPalette.model_validate(item) for item in result]
        except (SchemaError, TypeError) as e:
            raise DesignApiError(user_friendly_error(f"Unexpected palette format: {e}")) from e


_default_client = DesignApiClient()


async def generate_design_ideas(
    base64_image: str,
    style: str,
    dimensions: Optional[RoomDimensions],
    room_type: str
) -> DesignPlan:
    return await _default_client.generate_design_ideas(base64_image, style, dimensions, room_type)


async def generate_redesigned_image(
    design_plan: DesignPlan,
    style: str,
    room_type: str,
    base64_image: str,
    new_colors: Optional[ColorPalette] = None
) -> str:
    return await _default_client.generate_redesigned_image(design_plan, style, room_type, base64_image, new_colors)


async def generate_more_palettes(design_plan: DesignPlan, style: str) -> List[ColorPalette]:
    return await _default_client.generate_more_palettes(design_plan, style)
