"""업로드 이미지 처리"""
import base64
import binascii
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from ..models.exceptions import ValidationError

DEFAULT_MIME_TYPE = "image/jpeg"

# Gemini 가 받는 이미지 형식 (JPEG 계열 MPO 등 나머지는 image/jpeg 로 전송)
SUPPORTED_MIME_TYPES = {"image/png", "image/webp", "image/heic", "image/heif"}


def decode_base64_image(data: str) -> bytes:
    """base64 문자열 또는 data URL 을 bytes 로 변환"""
    if "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"base64Image is not valid base64 data: {e}")


def detect_mime_type(image_data: bytes) -> str:
    """Pillow 로 이미지 포맷 판별, 지원 형식이 아니거나 판별 불가면 image/jpeg"""
    try:
        with Image.open(BytesIO(image_data)) as img:
            mime_type = Image.MIME.get(img.format)
    except (UnidentifiedImageError, OSError):
        return DEFAULT_MIME_TYPE
    return mime_type if mime_type in SUPPORTED_MIME_TYPES else DEFAULT_MIME_TYPE
