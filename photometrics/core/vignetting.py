"""비네팅(주변부 광량 저하) 분석"""

import math
import numpy as np
import cv2
from typing import Optional

from ..config import MeasurementSettings, DEFAULT_SETTINGS
from ..models.results import Region, VignettingResult
from ..utils.logger import logger
from .buffer import PixelBuffer, luma_from_rgb
from .noise import mean


def _sample_brightness(buffer: PixelBuffer, cx: float, cy: float, size: float) -> float:
    """(cx, cy) 중심 size 정사각형의 평균 휘도 (이미지 경계로 잘라냄)"""
    x0 = max(cx - size / 2.0, 0.0)
    y0 = max(cy - size / 2.0, 0.0)
    x1 = min(cx + size / 2.0, float(buffer.width))
    y1 = min(cy + size / 2.0, float(buffer.height))
    return mean(buffer.extract_luma(Region(x0, y0, x1 - x0, y1 - y0)))


def falloff_to_ev(falloff: float) -> float:
    """광량 저하(%) → EV 손실"""
    if falloff >= 100.0:
        return math.inf
    return math.log2(100.0 / (100.0 - falloff))


def brightness_grid(buffer: PixelBuffer, grid_size: int = 20) -> np.ndarray:
    """이미지를 grid_size x grid_size 셀 평균 휘도로 축소"""
    luma = luma_from_rgb(buffer.data[..., :3])
    return cv2.resize(luma, (grid_size, grid_size), interpolation=cv2.INTER_AREA)


def analyze_vignetting(buffer: PixelBuffer,
                       sample_fraction: Optional[float] = None,
                       grid_size: Optional[int] = None,
                       settings: Optional[MeasurementSettings] = None) -> VignettingResult:
    """
    균일 조명 평면 촬영 이미지의 비네팅 분석

    중앙 대비 네 모서리/네 변 중점의 평균 휘도 저하율을 계산.
    샘플 크기는 이미지 짧은 변 × sample_fraction 이며
    모서리/변 샘플은 경계에서 샘플 크기만큼 안쪽.

    Args:
        buffer: RGBA 픽셀 버퍼
        sample_fraction: 샘플 크기 비율 (None이면 settings.vignetting_sample_fraction)
        grid_size: 히트맵 격자 크기 (None이면 settings.vignetting_grid)
        settings: 측정 파라미터

    Returns:
        VignettingResult (heatmap은 중앙 대비 밝기 비율)
    """
    if settings is None:
        settings = DEFAULT_SETTINGS
    if sample_fraction is None:
        sample_fraction = settings.vignetting_sample_fraction
    if grid_size is None:
        grid_size = settings.vignetting_grid

    w, h = buffer.width, buffer.height
    size = max(min(w, h) * sample_fraction, 1.0)
    cx, cy = w / 2.0, h / 2.0

    center = _sample_brightness(buffer, cx, cy, size)

    corners = [(size, size), (w - size, size), (size, h - size), (w - size, h - size)]
    edges = [(cx, size), (cx, h - size), (size, cy), (w - size, cy)]
    corner_avg = mean([_sample_brightness(buffer, x, y, size) for x, y in corners])
    edge_avg = mean([_sample_brightness(buffer, x, y, size) for x, y in edges])

    grid = brightness_grid(buffer, grid_size)

    if center <= 0.0:
        logger.warning("중앙 휘도가 0: 비네팅 저하율을 0으로 처리")
        corner_falloff = 0.0
        edge_falloff = 0.0
        heatmap = np.zeros_like(grid)
    else:
        corner_falloff = (center - corner_avg) / center * 100.0
        edge_falloff = (center - edge_avg) / center * 100.0
        heatmap = grid / center

    score = 100.0 - (corner_falloff + edge_falloff) / 2.0

    result = VignettingResult(
        center_brightness=center,
        corner_brightness=corner_avg,
        edge_brightness=edge_avg,
        corner_falloff=corner_falloff,
        edge_falloff=edge_falloff,
        uniformity_score=min(max(score, 0.0), 100.0),
        heatmap=heatmap,
    )

    logger.info(f"비네팅: 모서리 {corner_falloff:.1f}% "
                f"({falloff_to_ev(corner_falloff):.2f} EV), "
                f"변 {edge_falloff:.1f}%")
    return result
