"""
다이나믹 레인지 평가 (그레이 웨지)

웨지는 밝은 단계부터 어두운 단계 순서로 가로로 배열된 것으로 가정.
각 단계는 고정 EV 간격이며 중앙 단계가 0 EV.
"""

import time
from typing import Optional, Sequence, Tuple, List

from ..config import MeasurementSettings, DEFAULT_SETTINGS
from ..models.errors import NumericDomainError
from ..models.results import GrayStep, DynamicRangeResult, Region
from ..utils.logger import logger
from .buffer import PixelBuffer
from .noise import mean, standard_deviation, signal_to_noise_ratio


def ev_for_step(index: int, n_steps: int, ev_step: float = 0.5) -> float:
    """
    단계 인덱스(0 = 가장 밝음) → EV

    21단계, 0.5 EV 간격이면 +5 ... -5 EV.
    """
    return ((n_steps - 1) / 2.0 - index) * ev_step


def evaluate_gray_steps(samples: Sequence[Tuple[float, float]],
                        settings: Optional[MeasurementSettings] = None
                        ) -> DynamicRangeResult:
    """
    (밝기, 노이즈) 샘플 목록을 단계별로 분류

    유효 조건: SNR > snr_threshold_db 이고 clip_low < 밝기 < clip_high

    Args:
        samples: 밝은 단계부터 순서대로 [(brightness, noise), ...]
        settings: 측정 파라미터

    Returns:
        DynamicRangeResult (total = 유효 단계 수 × ev_step)
    """
    if settings is None:
        settings = DEFAULT_SETTINGS

    n_steps = len(samples)
    steps: List[GrayStep] = []
    for i, (brightness, noise) in enumerate(samples):
        snr = signal_to_noise_ratio(brightness, noise)
        valid = (snr > settings.snr_threshold_db
                 and settings.clip_low < brightness < settings.clip_high)
        steps.append(GrayStep(
            step=i + 1,
            ev=ev_for_step(i, n_steps, settings.ev_step),
            brightness=float(brightness),
            noise=float(noise),
            snr=snr,
            valid=valid,
        ))

    valid_steps = [s for s in steps if s.valid]
    highlight = [s for s in valid_steps if s.ev > 0]
    shadow = [s for s in valid_steps if s.ev < 0]

    return DynamicRangeResult(
        steps=steps,
        total_range=len(valid_steps) * settings.ev_step,
        highlight_headroom=len(highlight) * settings.ev_step,
        shadow_range=len(shadow) * settings.ev_step,
        ev_step=settings.ev_step,
    )


def gray_step_regions(region: Region, n_steps: int) -> List[Region]:
    """
    웨지 영역을 n_steps 개 세로 띠로 분할

    각 띠의 가로 중앙 80%, 세로 중앙 60%만 샘플링하여 경계 번짐을 제외.
    """
    if n_steps < 1:
        raise NumericDomainError(f"단계 수는 1 이상이어야 함: {n_steps}")
    step_width = region.width / n_steps
    sample_y = region.y + region.height * 0.2
    sample_h = region.height * 0.6
    return [Region(region.x + i * step_width + step_width * 0.1, sample_y,
                   step_width * 0.8, sample_h)
            for i in range(n_steps)]


def sample_gray_steps(buffer: PixelBuffer,
                      region: Optional[Region] = None,
                      n_steps: int = 21) -> List[Tuple[float, float]]:
    """웨지 각 단계의 (평균 휘도, 휘도 σ)"""
    if region is None:
        region = buffer.full_region
    buffer.validate(region)

    samples = []
    for step_region in gray_step_regions(region, n_steps):
        luma = buffer.extract_luma(step_region)
        samples.append((mean(luma), standard_deviation(luma)))
    return samples


def analyze_dynamic_range(buffer: PixelBuffer,
                          region: Optional[Region] = None,
                          settings: Optional[MeasurementSettings] = None
                          ) -> DynamicRangeResult:
    """그레이 웨지 이미지의 다이나믹 레인지 평가"""
    start_time = time.time()
    if settings is None:
        settings = DEFAULT_SETTINGS

    samples = sample_gray_steps(buffer, region, settings.gray_steps)
    result = evaluate_gray_steps(samples, settings)

    logger.info(f"다이나믹 레인지: {result.total_range:.1f} EV "
                f"(하이라이트 {result.highlight_headroom:.1f}, "
                f"섀도우 {result.shadow_range:.1f}, "
                f"유효 {result.n_valid}/{len(result.steps)}단계, "
                f"처리시간={time.time() - start_time:.3f}s)")
    return result
