"""단일 영역 MTF 분석 및 5점 샘플링 배치"""

import math
import time
from typing import Dict, Optional, Tuple

from ...config import MeasurementSettings, DEFAULT_SETTINGS
from ...models.errors import NumericDomainError
from ...models.results import MTFResult, Region
from ...utils.logger import logger
from ..buffer import PixelBuffer
from .edge import detect_slanted_edge_angle, extract_esf
from .frequency import compute_lsf, compute_mtf_from_lsf, find_mtf_value

# (x, y, width, height) 이미지 비율
MTF_SAMPLE_POSITIONS: Dict[str, Tuple[float, float, float, float]] = {
    'center': (0.4, 0.4, 0.2, 0.2),
    'top_left': (0.05, 0.05, 0.15, 0.15),
    'top_right': (0.8, 0.05, 0.15, 0.15),
    'bottom_left': (0.05, 0.8, 0.15, 0.15),
    'bottom_right': (0.8, 0.8, 0.15, 0.15),
}


def mtf_sample_regions(width: int, height: int) -> Dict[str, Region]:
    """이미지 크기에 맞춘 5점 MTF 샘플 영역"""
    return {
        name: Region.from_fractions(*fractions, width, height)
        for name, fractions in MTF_SAMPLE_POSITIONS.items()
    }


def analyze_mtf_region(buffer: PixelBuffer,
                       region: Region,
                       position: str = "selected",
                       settings: Optional[MeasurementSettings] = None) -> MTFResult:
    """
    슬랜티드 에지 MTF 분석

    각도 검출 → ESF → LSF → MTF → MTF50/30/10 순서로 진행하며
    중간 단계 실패 시 예외가 그대로 전파됨.

    Args:
        buffer: RGBA 픽셀 버퍼
        region: 에지 영역
        position: 결과 라벨
        settings: 측정 파라미터 (None이면 기본값)

    Returns:
        MTFResult
    """
    start_time = time.time()
    if settings is None:
        settings = DEFAULT_SETTINGS

    pixels = buffer.extract_rgb(region)

    angle = detect_slanted_edge_angle(pixels, settings.min_edge_contrast)
    esf = extract_esf(pixels, angle, settings.oversampling)
    lsf = compute_lsf(esf, settings.lsf_window)
    curve = compute_mtf_from_lsf(lsf, settings.fft_size)

    if len(settings.mtf_thresholds) != 3:
        raise NumericDomainError(
            f"MTF 임계값은 3개여야 함: {settings.mtf_thresholds}")
    mtf50, mtf30, mtf10 = (find_mtf_value(curve, t)
                           for t in settings.mtf_thresholds)

    result = MTFResult(
        position=position,
        angle_deg=math.degrees(angle),
        mtf50=mtf50,
        mtf30=mtf30,
        mtf10=mtf10,
        curve=curve,
        region=region,
        processing_time=time.time() - start_time,
    )

    logger.debug(f"[{position}] MTF50={result.cycles_per_pixel['mtf50']:.3f} cy/px, "
                 f"각도={result.angle_deg:.2f}°")
    return result
