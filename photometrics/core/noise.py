"""
노이즈 / SNR 통계

- calculate_noise: 선택 영역의 휘도/색차 노이즈와 SNR
- analyze_noise: 균일 블록 자동 검출 후 Laplacian 고역 통과 노이즈 분석
"""

import math
import time
import numpy as np
import cv2
from typing import List, Optional, Sequence, Tuple

from ..config import MeasurementSettings, DEFAULT_SETTINGS
from ..models.errors import InsufficientSamplesError
from ..models.results import NoiseResult, NoiseAnalysis, UniformRegion, Region
from ..utils.logger import logger
from .buffer import PixelBuffer, luma_from_rgb

# 노이즈가 0일 때 반환하는 SNR (dB)
SNR_SENTINEL_DB = 100.0

MIN_NOISE_PIXELS = 4
NOISE_SPECTRUM_BINS = 10


# ===== 기본 통계 =====

def mean(values: np.ndarray) -> float:
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return 0.0
    return float(np.mean(values))


def standard_deviation(values: np.ndarray) -> float:
    """모표준편차 (ddof=0), 빈 배열은 0.0"""
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return 0.0
    return float(np.std(values))


def signal_to_noise_ratio(signal: float, noise: float) -> float:
    """
    SNR (dB) = 20 log10(signal / noise)

    noise <= 0 이면 SNR_SENTINEL_DB, signal <= 0 이면 -SNR_SENTINEL_DB.
    """
    if noise <= 0.0:
        return SNR_SENTINEL_DB
    if signal <= 0.0:
        return -SNR_SENTINEL_DB
    return 20.0 * math.log10(signal / noise)


def rgb_to_ycbcr(rgb: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """(..., 3) RGB → (Y, Cb, Cr), BT.601 full range"""
    rgb = np.asarray(rgb, dtype=np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    y = 0.299 * r + 0.587 * g + 0.114 * b
    cb = 128.0 - 0.168736 * r - 0.331264 * g + 0.5 * b
    cr = 128.0 + 0.5 * r - 0.418688 * g - 0.081312 * b
    return y, cb, cr


# ===== 영역 노이즈 =====

def calculate_noise(buffer: PixelBuffer, region: Region) -> NoiseResult:
    """
    영역 노이즈 통계

    Args:
        buffer: RGBA 픽셀 버퍼
        region: 균일 패치 영역

    Returns:
        NoiseResult(luminance_noise=σ(Y),
                    chroma_noise=sqrt((σ(R-Y)² + σ(B-Y)²) / 2),
                    snr=20 log10(mean(Y) / σ(Y)))

    Raises:
        InvalidRegionError: 영역 오류
        InsufficientSamplesError: 픽셀 4개 미만
    """
    rgb = buffer.extract_rgb(region).reshape(-1, 3)
    if rgb.shape[0] < MIN_NOISE_PIXELS:
        raise InsufficientSamplesError(
            f"노이즈 추정 픽셀 부족: {rgb.shape[0]} < {MIN_NOISE_PIXELS}")

    luma = luma_from_rgb(rgb)
    luminance_noise = standard_deviation(luma)

    r_y = standard_deviation(rgb[:, 0] - luma)
    b_y = standard_deviation(rgb[:, 2] - luma)
    chroma_noise = math.sqrt((r_y ** 2 + b_y ** 2) / 2.0)

    snr = signal_to_noise_ratio(mean(luma), luminance_noise)
    return NoiseResult(luminance_noise=luminance_noise,
                       chroma_noise=chroma_noise,
                       snr=snr)


# ===== 전체 노이즈 분석 =====

def high_pass_noise(channel: np.ndarray) -> np.ndarray:
    """
    4-이웃 Laplacian 고역 통과 (경계 1 px 제외)

    Returns:
        (H-2, W-2) 응답, 입력이 3x3 미만이면 빈 배열
    """
    channel = np.asarray(channel, dtype=np.float64)
    if channel.ndim != 2 or channel.shape[0] < 3 or channel.shape[1] < 3:
        return np.zeros((0, 0), dtype=np.float64)
    response = cv2.Laplacian(channel, cv2.CV_64F, ksize=1)
    return response[1:-1, 1:-1]


def detect_uniform_regions(buffer: PixelBuffer,
                           block_size: int = 32,
                           max_std: float = 10.0) -> List[UniformRegion]:
    """
    노이즈 측정에 적합한 균일 블록 검출

    이미지를 block_size 격자로 나누어 휘도 표준편차가 max_std 미만인 블록을
    표준편차 오름차순으로 반환.
    """
    luma = luma_from_rgb(buffer.data[..., :3])
    h, w = luma.shape

    regions = []
    for y in range(0, h - block_size + 1, block_size):
        for x in range(0, w - block_size + 1, block_size):
            block = luma[y:y + block_size, x:x + block_size]
            std = standard_deviation(block)
            if std < max_std:
                regions.append(UniformRegion(
                    x=x, y=y, width=block_size, height=block_size,
                    avg_luminance=mean(block), std_dev=std))

    regions.sort(key=lambda r: r.std_dev)
    return regions


def uniformity_score(regions: Sequence[UniformRegion]) -> float:
    """균일 블록 평균 σ 기반 점수 (σ <= 2 → 100, σ >= ~20 → 0)"""
    if not regions:
        return 0.0
    avg_std = mean([r.std_dev for r in regions])
    return float(round(min(max(100.0 - (avg_std - 2.0) * 5.5, 0.0), 100.0)))


def noise_spectrum(luma: np.ndarray, n_bins: int = NOISE_SPECTRUM_BINS) -> List[float]:
    """고역 통과 응답을 행 순서로 n_bins 등분한 구간별 σ"""
    filtered = high_pass_noise(luma).ravel()
    bin_size = filtered.size // n_bins
    if bin_size == 0:
        return [0.0] * n_bins
    return [standard_deviation(filtered[i * bin_size:(i + 1) * bin_size])
            for i in range(n_bins)]


def analyze_noise(buffer: PixelBuffer,
                  region: Optional[Region] = None,
                  block_size: Optional[int] = None,
                  max_std: Optional[float] = None,
                  settings: Optional[MeasurementSettings] = None) -> NoiseAnalysis:
    """
    종합 노이즈 분석

    region을 지정하지 않으면 가장 균일한 블록에서 측정하며,
    균일 블록이 없으면 이미지 전체를 사용.

    Args:
        buffer: RGBA 픽셀 버퍼
        region: 측정 영역 (None이면 자동)
        block_size: 균일 블록 크기 (None이면 settings.noise_block_size)
        max_std: 균일 블록 판정 σ 상한 (None이면 settings.noise_max_std)
        settings: 측정 파라미터

    Returns:
        NoiseAnalysis
    """
    start_time = time.time()

    if settings is None:
        settings = DEFAULT_SETTINGS
    if block_size is None:
        block_size = settings.noise_block_size
    if max_std is None:
        max_std = settings.noise_max_std

    uniform = detect_uniform_regions(buffer, block_size, max_std)
    if region is None:
        region = uniform[0].to_region() if uniform else buffer.full_region
        logger.debug(f"노이즈 측정 영역 자동 선택: {region} "
                     f"(균일 블록 {len(uniform)}개)")

    rgb = buffer.extract_rgb(region)
    y, cb, cr = rgb_to_ycbcr(rgb)

    y_hp = high_pass_noise(y)
    if y_hp.size == 0:
        raise InsufficientSamplesError(
            f"노이즈 분석 영역이 너무 작음: {rgb.shape[1]}x{rgb.shape[0]}")

    luminance_noise = standard_deviation(y_hp)
    cb_noise = standard_deviation(high_pass_noise(cb))
    cr_noise = standard_deviation(high_pass_noise(cr))
    chroma_noise = math.sqrt((cb_noise ** 2 + cr_noise ** 2) / 2.0)

    snr = signal_to_noise_ratio(mean(y), luminance_noise)

    result = NoiseAnalysis(
        luminance_noise=luminance_noise,
        chroma_noise=chroma_noise,
        snr=snr,
        uniformity_score=uniformity_score(uniform),
        noise_spectrum=noise_spectrum(luma_from_rgb(buffer.data[..., :3])),
        uniform_regions=uniform,
    )

    logger.info(f"노이즈 분석 완료: 휘도 σ={luminance_noise:.2f}, "
                f"색차 σ={chroma_noise:.2f}, SNR={snr:.1f}dB, "
                f"처리시간={time.time() - start_time:.3f}s")
    return result


def estimate_usable_iso_limit(snr_by_iso: Sequence[Tuple[int, float]],
                              min_snr: float = 30.0) -> int:
    """
    사용 가능 ISO 상한

    ISO 오름차순으로 SNR이 처음 min_snr 미만이 되는 ISO를 반환.
    모두 만족하면 가장 높은 ISO, 입력이 없으면 0.

    Args:
        snr_by_iso: [(iso, snr_db), ...]
        min_snr: 허용 최소 SNR (dB)
    """
    if not snr_by_iso:
        return 0
    ordered = sorted(snr_by_iso, key=lambda item: item[0])
    for iso, snr in ordered:
        if snr < min_snr:
            return int(iso)
    return int(ordered[-1][0])
