"""애플리케이션 설정"""
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode
from typing import Annotated, List


class Settings(BaseSettings):
    """환경변수 기반 설정"""

    # API Keys
    gemini_api_key: str

    # Application
    app_name: str = "Room Makeover API"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS
    cors_origins: Annotated[List[str], NoDecode] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """콤마로 구분된 문자열도 허용"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Gemini API
    gemini_text_model: str = "gemini-2.5-flash"
    gemini_image_model: str = "gemini-2.5-flash-image-preview"
    design_temperature: float = 0.7  # 디자인 플랜 생성
    palette_temperature: float = 0.8  # 팔레트 재생성은 조금 더 다양하게

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False


# 전역 설정 인스턴스
settings = Settings()
