import base64
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Annotated, Any, List, Literal, Optional, Union


class CamelModel(BaseModel):
    """파이썬 속성은 snake_case, JSON 은 camelCase"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class ColorPalette(CamelModel):
    """메인/포인트 색상 조합"""
    color: str = ""
    accent: str = ""


class FurnitureItem(CamelModel):
    """추천 가구/소품"""
    name: str = ""
    description: str = ""
    placement: str = ""
    estimated_price: float = 0.0
    model_url: Optional[str] = None


class EstimatedCost(CamelModel):
    """전체 리모델링 예산 범위"""
    min: float = 0.0
    max: float = 0.0
    currency: str = "USD"


class DesignPlan(CamelModel):
    """인테리어 디자인 플랜"""
    analysis: str
    design_rationale: str
    wall_color: ColorPalette
    lighting: str
    flooring: str
    furniture_suggestions: List[FurnitureItem]
    estimated_cost: EstimatedCost
    alternative_palettes: List[ColorPalette]


class RoomDimensions(CamelModel):
    """방 크기 (선택 입력)"""
    width: Optional[float] = None
    length: Optional[float] = None
    unit: str = "ft"

    @property
    def is_complete(self) -> bool:
        return bool(self.width and self.length)

    @property
    def unit_name(self) -> str:
        return "feet" if self.unit == "ft" else "meters"


class Action(str, Enum):
    """/api/generate 가 받는 action"""
    GENERATE_DESIGN_IDEAS = "generateDesignIdeas"
    GENERATE_REDESIGNED_IMAGE = "generateRedesignedImage"
    GENERATE_MORE_PALETTES = "generateMorePalettes"


# --- 요청 payload ---

class DesignIdeasPayload(CamelModel):
    base64_image: str
    style: str
    dimensions: Optional[RoomDimensions] = None
    room_type: str


class RedesignedImagePayload(CamelModel):
    design_plan: DesignPlan
    style: str
    room_type: str
    base64_image: str
    new_colors: Optional[ColorPalette] = None


class MorePalettesPayload(CamelModel):
    design_plan: DesignPlan
    style: str


class ErrorResponse(BaseModel):
    """실패 응답 봉투"""
    error: str


# --- action 별 결과 (tagged union) ---

class DesignIdeasResult(BaseModel):
    action: Literal[Action.GENERATE_DESIGN_IDEAS] = Action.GENERATE_DESIGN_IDEAS
    plan: DesignPlan

    def to_body(self) -> Any:
        return self.plan.to_json_dict()


class RedesignedImageResult(BaseModel):
    action: Literal[Action.GENERATE_REDESIGNED_IMAGE] = Action.GENERATE_REDESIGNED_IMAGE
    image: bytes

    def to_body(self) -> Any:
        # 프론트엔드는 base64 문자열을 data URL 로 사용
        return base64.b64encode(self.image).decode("ascii")


class MorePalettesResult(BaseModel):
    action: Literal[Action.GENERATE_MORE_PALETTES] = Action.GENERATE_MORE_PALETTES
    palettes: List[ColorPalette]

    def to_body(self) -> Any:
        return [palette.to_json_dict() for palette in self.palettes]


ActionResult = Annotated[
    Union[DesignIdeasResult, RedesignedImageResult, MorePalettesResult],
    Field(discriminator="action")
]
