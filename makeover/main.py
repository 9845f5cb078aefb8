from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional

from .config import Settings, settings
from .routes import generate
from .services.gemini_service import GeminiService
from .utils.logger import logger, set_log_level


def create_app(config: Settings = settings, gemini_service: Optional[GeminiService] = None) -> FastAPI:
    """FastAPI 앱 생성 (GeminiService 는 프로세스당 하나)"""
    set_log_level(config.log_level)
    logger.info(f"Starting {config.app_name} v{config.app_version}")

    app = FastAPI(
        title=config.app_name,
        description="AI 인테리어 리디자인 API (디자인 플랜, 리디자인 이미지, 컬러 팔레트)",
        version=config.app_version,
        debug=config.debug
    )

    # CORS 설정 (환경변수 기반)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info(f"CORS enabled for origins: {config.cors_origins}")

    app.state.settings = config
    app.state.gemini_service = gemini_service or GeminiService(config)

    app.include_router(generate.router)

    @app.get("/health")
    async def health_check():
        """헬스 체크 및 시스템 상태"""
        return {
            "status": "healthy",
            "version": config.app_version,
            "gemini_api_key_configured": bool(config.gemini_api_key),
            "config": {
                "text_model": config.gemini_text_model,
                "image_model": config.gemini_image_model
            }
        }

    @app.on_event("startup")
    async def startup_event():
        """애플리케이션 시작 시 실행"""
        logger.info("="*50)
        logger.info("Application startup")
        logger.info(f"Debug mode: {config.debug}")
        logger.info(f"Gemini API configured: {bool(config.gemini_api_key)}")
        logger.info(f"Models: text={config.gemini_text_model}, image={config.gemini_image_model}")
        logger.info("="*50)

    @app.on_event("shutdown")
    async def shutdown_event():
        """애플리케이션 종료 시 실행"""
        logger.info("Application shutdown")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
