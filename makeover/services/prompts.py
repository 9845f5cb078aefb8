"""Gemini 프롬프트 및 응답 스키마"""
from typing import List, Optional

from google.genai import types

from ..models.schemas import ColorPalette, DesignPlan, RoomDimensions


def _string(description: str, nullable: bool = False) -> types.Schema:
    return types.Schema(type=types.Type.STRING, description=description, nullable=nullable or None)


def _number(description: str) -> types.Schema:
    return types.Schema(type=types.Type.NUMBER, description=description)


def _palette(color_description: str, accent_description: str, required: Optional[List[str]] = None) -> types.Schema:
    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "color": _string(color_description),
            "accent": _string(accent_description),
        },
        required=required,
    )


DESIGN_PLAN_REQUIRED = [
    "analysis",
    "designRationale",
    "wallColor",
    "lighting",
    "flooring",
    "furnitureSuggestions",
    "estimatedCost",
    "alternativePalettes",
]

DESIGN_PLAN_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "analysis": _string(
            "A brief analysis of the current room's layout, lighting, and existing decor. "
            "If room dimensions were provided, mention how they influence the design."
        ),
        "designRationale": _string(
            "A brief explanation of why the proposed design elements (colors, furniture, etc.) work "
            "together to achieve the desired style, referencing core interior design principles like "
            "balance, harmony, and focal points."
        ),
        "wallColor": types.Schema(
            type=types.Type.OBJECT,
            description="Recommendations for the primary wall color palette.",
            properties={
                "color": _string("The primary wall color suggestion (e.g., 'Soft Off-White')."),
                "accent": _string("An accent wall color suggestion (e.g., 'Charcoal Gray')."),
            },
        ),
        "lighting": _string(
            "Suggestions for lighting fixtures (e.g., 'A large, arched floor lamp and recessed ceiling lights')."
        ),
        "flooring": _string(
            "Recommendations for flooring (e.g., 'Light oak hardwood floors or a large, neutral-toned area rug')."
        ),
        "furnitureSuggestions": types.Schema(
            type=types.Type.ARRAY,
            description="A list of 3-5 key furniture and decor items, appropriately scaled for the room size if provided.",
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "name": _string("The name of the furniture or decor item (e.g., 'Plush Sectional Sofa')."),
                    "description": _string("A detailed description of the item's style, material, and color."),
                    "placement": _string("Where to place this item in the room."),
                    "estimatedPrice": _number("An estimated price for this item in USD."),
                    "modelUrl": _string(
                        "A publicly accessible URL to a 3D model of the furniture item, preferably in GLTF or "
                        "OBJ format. Can be null if no model is found. If a real model URL cannot be found, "
                        "provide a realistic placeholder URL like 'https://example.com/models/modern-sofa.gltf'.",
                        nullable=True,
                    ),
                },
            ),
        ),
        "estimatedCost": types.Schema(
            type=types.Type.OBJECT,
            description="An estimated budget range for the entire makeover in USD.",
            properties={
                "min": _number("The minimum estimated cost in USD."),
                "max": _number("The maximum estimated cost in USD."),
                "currency": _string("The currency, e.g., 'USD'."),
            },
        ),
        "alternativePalettes": types.Schema(
            type=types.Type.ARRAY,
            description=(
                "A list of exactly 3 alternative color palettes that also fit the style. "
                "Each should have a primary and an accent color."
            ),
            items=_palette("The alternative primary wall color.", "The alternative accent wall color."),
        ),
    },
    required=DESIGN_PLAN_REQUIRED,
)

MORE_PALETTES_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    description=(
        "A list of exactly 3 new and distinct color palettes. "
        "Each palette must have a primary and an accent color."
    ),
    items=_palette(
        "The new primary wall color.",
        "The new accent wall color.",
        required=["color", "accent"],
    ),
)


def build_dimension_text(dimensions: Optional[RoomDimensions]) -> str:
    """가로/세로가 모두 있을 때만 크기 안내 문장 생성"""
    if dimensions is None or not dimensions.is_complete:
        return ""
    unit = dimensions.unit_name
    return (
        f" The user has specified the room is approximately {dimensions.width:g} {unit} wide by "
        f"{dimensions.length:g} {unit} long. Please ensure your furniture suggestions and layout advice "
        "are appropriately scaled for a room of this size and explicitly mention this in your analysis."
    )


def build_design_ideas_prompt(style: str, room_type: str, dimensions: Optional[RoomDimensions]) -> str:
    """디자인 플랜 생성 프롬프트"""
    dimension_text = build_dimension_text(dimensions)
    return f"""You are a world-class AI interior designer with a keen eye for detail and aesthetics. Analyze the provided room image, which is a {room_type}, and generate a complete design makeover plan in a friendly and inspiring tone. The user wants a "{style}" style. Your recommendations must be appropriate for a {room_type}. Your goal is to create a truly inspiring and practical makeover plan.
{dimension_text}
Your tasks are:
1. Briefly analyze the current room's strengths and weaknesses.
2. Suggest a full makeover based on the selected style, keeping the provided dimensions in mind if available.
3. Output specific ideas for a primary wall color palette, flooring, and lighting.
4. Recommend 3-5 key furniture or decor items with detailed descriptions and placement suggestions. Ensure items are scaled correctly for the room. For each recommended item, you must also provide a `modelUrl`, which should be a publicly accessible URL to a 3D model of the item, preferably in GLTF or OBJ format. If a real model cannot be found, provide a realistic placeholder URL (e.g., 'https://models.example.com/modern_chair.gltf').
5. Provide a realistic, estimated total budget range (min and max) for the complete makeover. Also, include an estimated price for each recommended furniture item. All monetary values should be in USD.
6. Also provide exactly 3 alternative color palettes (primary and accent) that would offer a different mood while still fitting the requested style.
7. Provide a 'Design Rationale' explaining why your suggestions create a cohesive and high-quality '{style}' design, touching on principles like balance, harmony, or focal points.

Provide the output in JSON format according to the provided schema. Ensure the descriptions are vivid and helpful."""


def is_exterior(room_type: str) -> bool:
    return bool(room_type) and room_type.lower() == "exterior"


def build_redesign_prompt(
    plan: DesignPlan,
    style: str,
    room_type: str,
    override_colors: Optional[ColorPalette] = None
) -> str:
    """리디자인 이미지 생성 프롬프트 (실내 / 외관)"""
    furniture_list = "\n".join(f"- {item.name}: {item.placement}" for item in plan.furniture_suggestions)

    # 새 팔레트가 있으면 필드 단위로 대체
    primary_color = (override_colors.color if override_colors else None) or plan.wall_color.color
    accent_color = (override_colors.accent if override_colors else None) or plan.wall_color.accent

    if is_exterior(room_type):
        return f"""Redesign the exterior of this building in a photorealistic {style} style.
Incorporate these elements:
- Facade: {primary_color} with {accent_color} accents.
- Hardscape & ground cover: {plan.flooring}.
- Outdoor lighting: {plan.lighting}.
- Landscaping & decor:
{furniture_list}
Crucially, preserve the original architecture, including the roofline, windows, doors, and overall building footprint. Replace only the landscaping, outdoor furnishings, and decor.
The final output must be only the redesigned image, with no text."""

    return f"""Redesign this {room_type} in a photorealistic {style} style.
Incorporate these elements:
- Walls: {primary_color} with {accent_color} accents.
- Flooring: {plan.flooring}.
- Lighting: {plan.lighting}.
- Furniture:
{furniture_list}
Crucially, preserve the original room's structure, like walls, windows, and doors. Replace only the furnishings and decor.
The final output must be only the redesigned image, with no text."""


def build_more_palettes_prompt(plan: DesignPlan, style: str) -> str:
    """추가 팔레트 생성 프롬프트 (이미 본 팔레트 제외)"""
    existing_palettes = "\n".join(
        f"- {palette.color} & {palette.accent}"
        for palette in [plan.wall_color, *plan.alternative_palettes]
    )
    return f"""You are an AI color consultant for an interior design app. Based on the following design analysis for a "{style}" themed room, please generate exactly 3 new and distinct color palettes.

**Design Analysis:** {plan.analysis}

**Important:** The user has already seen the following palettes, so please provide completely different options that suggest different moods (e.g., one calming, one energetic, one sophisticated):
{existing_palettes}

Return the output as a JSON array of objects, where each object has a 'color' and 'accent' property, according to the provided schema."""
