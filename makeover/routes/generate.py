from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from typing import Any, Awaitable, Callable, Dict, Type, TypeVar

from ..models.exceptions import InvalidAction, MakeoverError, MethodNotAllowed, ValidationError
from ..models.schemas import (
    Action,
    ActionResult,
    DesignIdeasPayload,
    DesignIdeasResult,
    ErrorResponse,
    MorePalettesPayload,
    MorePalettesResult,
    RedesignedImagePayload,
    RedesignedImageResult,
)
from ..services.gemini_service import GeminiService
from ..utils.images import decode_base64_image
from ..utils.logger import logger

router = APIRouter(prefix="/api", tags=["generate"])

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def get_gemini_service(request: Request) -> GeminiService:
    """앱 생성 시 만들어 둔 GeminiService 반환"""
    return request.app.state.gemini_service


def error_response(error: MakeoverError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=ErrorResponse(error=error.message).model_dump())


def parse_payload(model: Type[PayloadT], payload: Any) -> PayloadT:
    """payload 검증, 실패 시 필드 위치와 사유만 요약"""
    try:
        return model.model_validate(payload if payload is not None else {})
    except SchemaError as e:
        summary = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'payload'}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationError(f"Invalid payload: {summary}")


async def handle_design_ideas(service: GeminiService, payload: Any) -> DesignIdeasResult:
    data = parse_payload(DesignIdeasPayload, payload)
    plan = await service.request_design_ideas(
        decode_base64_image(data.base64_image),
        data.style,
        data.dimensions,
        data.room_type
    )
    return DesignIdeasResult(plan=plan)


async def handle_redesigned_image(service: GeminiService, payload: Any) -> RedesignedImageResult:
    data = parse_payload(RedesignedImagePayload, payload)
    image = await service.request_redesigned_image(
        data.design_plan,
        data.style,
        data.room_type,
        decode_base64_image(data.base64_image),
        data.new_colors
    )
    return RedesignedImageResult(image=image)


async def handle_more_palettes(service: GeminiService, payload: Any) -> MorePalettesResult:
    data = parse_payload(MorePalettesPayload, payload)
    palettes = await service.request_more_palettes(data.design_plan, data.style)
    return MorePalettesResult(palettes=palettes)


ACTION_HANDLERS: Dict[Action, Callable[[GeminiService, Any], Awaitable[ActionResult]]] = {
    Action.GENERATE_DESIGN_IDEAS: handle_design_ideas,
    Action.GENERATE_REDESIGNED_IMAGE: handle_redesigned_image,
    Action.GENERATE_MORE_PALETTES: handle_more_palettes,
}


def resolve_action(value: Any) -> Action:
    """action 문자열 검증 (Provider 호출 전에 실패)"""
    try:
        return Action(value)
    except ValueError:
        raise InvalidAction(value)


@router.post("/generate")
async def generate(request: Request, service: GeminiService = Depends(get_gemini_service)):
    """{action, payload} 를 받아 해당 Gemini 작업 실행

    성공 시 결과 값 자체를 반환 (DesignPlan / base64 이미지 / 팔레트 목록)
    실패 시 {"error": message}
    """
    action = None
    try:
        body = await request.json()
        try:
            action = resolve_action(body.get("action") if isinstance(body, dict) else None)
        except InvalidAction as e:
            logger.warning(f"Invalid action requested: {e.action!r}")
            return error_response(e)

        logger.info(f"Action requested: {action.value}")
        result = await ACTION_HANDLERS[action](service, body.get("payload"))

    except Exception as e:
        message = e.message if isinstance(e, MakeoverError) else str(e)
        label = action.value if action else "unknown"
        logger.error(f"Error in API route for action {label}: {type(e).__name__}: {message}", exc_info=True)
        return JSONResponse(status_code=500, content=ErrorResponse(error=f"Server error: {message}").model_dump())

    logger.info(f"Action completed: {action.value}")
    return JSONResponse(status_code=200, content=result.to_body())


@router.api_route("/generate", methods=["GET", "PUT", "PATCH", "DELETE", "OPTIONS"], include_in_schema=False)
async def generate_method_not_allowed(request: Request):
    """POST 이외의 메서드는 405"""
    logger.warning(f"Method not allowed on /api/generate: {request.method}")
    return error_response(MethodNotAllowed(request.method))
