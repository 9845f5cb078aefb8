"""로깅 설정"""
import logging
import sys
from pathlib import Path
from typing import Optional


def setup_logger(
    name: str,
    level: str = "INFO",
    log_dir: Optional[Path] = Path("logs")
) -> logging.Logger:
    """구조화된 로거 설정 (콘솔 + 파일)"""

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # 이미 핸들러가 있으면 추가하지 않음 (중복 방지)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # 파일 핸들러 (log_dir=None 이면 생략)
    if log_dir is not None:
        log_dir.mkdir(exist_ok=True)
        file_handler = logging.FileHandler(log_dir / "app.log")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def set_log_level(level: str) -> None:
    """설정값으로 전역 로거 레벨 변경"""
    logger.setLevel(getattr(logging, level.upper()))


# 전역 로거 인스턴스
logger = setup_logger("room_makeover_api")
