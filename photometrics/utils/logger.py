"""로깅 설정 모듈"""

import logging
import os
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional, Union

LOG_FORMAT = '[%(asctime)s] %(levelname)s - %(name)s - %(message)s'

# 기본 레벨을 바꿀 때 사용하는 환경 변수 (예: DEBUG)
LOG_LEVEL_ENV = 'PHOTOMETRICS_LOG_LEVEL'


def _default_level() -> int:
    name = os.environ.get(LOG_LEVEL_ENV, 'INFO').upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def setup_logger(name: str = "photometrics",
                 level: Optional[int] = None,
                 log_file: bool = False,
                 log_dir: Union[str, Path] = "logs") -> logging.Logger:
    """
    로거 설정

    이미 핸들러가 있으면 기존 로거를 그대로 반환.

    Args:
        name: 로거 이름
        level: 로깅 레벨 (None = PHOTOMETRICS_LOG_LEVEL 또는 INFO)
        log_file: 파일 출력 여부
        log_dir: 로그 파일 디렉토리 (photometrics_YYYYMMDD.log)
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    logger.setLevel(level if level is not None else _default_level())
    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(
            log_path / f"{name}_{datetime.now():%Y%m%d}.log",
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def set_log_level(level: Union[int, str]) -> None:
    """전역 로거 레벨 변경 ('DEBUG' 같은 이름도 허용)"""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"알 수 없는 로그 레벨: {level}")
    logger.setLevel(level)


# 전역 로거
logger = setup_logger()
