"""
슬랜티드 에지 프로파일링

1. 각 스캔 라인의 1차 미분 중심(centroid)으로 서브픽셀 에지 위치 추정
2. 최소자승 직선 피팅으로 에지 기울기 추정
3. 모든 픽셀을 에지 법선에 투영하여 오버샘플링된 ESF 생성

에지가 수평에 가까우면 영역을 전치하여 항상 수직 에지로 처리함.
"""

import math
import numpy as np
import cv2
from typing import Tuple

from ...models.errors import DegenerateEdgeError, InsufficientSamplesError
from ...models.results import EdgeSpreadFunction
from ...utils.logger import logger
from ..buffer import to_luma

MIN_REGION_SIZE = 5
MIN_CROSSINGS = 3
CENTROID_RADIUS = 3
PEAK_REJECT_RATIO = 0.5
MIN_ANGLE_DEG = 0.5
# 경사가 이보다 크면 결과는 내되 경고
MAX_RECOMMENDED_ANGLE_DEG = 10.0


def _prepare_luma(pixels: np.ndarray) -> np.ndarray:
    luma = to_luma(pixels)
    h, w = luma.shape
    if h < MIN_REGION_SIZE or w < MIN_REGION_SIZE:
        raise InsufficientSamplesError(
            f"영역이 너무 작음: {w}x{h} (최소 {MIN_REGION_SIZE}x{MIN_REGION_SIZE})")
    return luma


def orient_edge(luma: np.ndarray) -> Tuple[np.ndarray, bool]:
    """
    Sobel 그래디언트 에너지로 지배 축 결정

    Returns:
        (수직 에지 기준으로 정렬된 luma, 전치 여부)
    """
    gx = cv2.Sobel(luma, cv2.CV_64F, 1, 0, ksize=3)
    gy = cv2.Sobel(luma, cv2.CV_64F, 0, 1, ksize=3)
    if np.sum(np.abs(gy)) > np.sum(np.abs(gx)):
        return np.ascontiguousarray(luma.T), True
    return luma, False


def edge_contrast(luma: np.ndarray) -> float:
    """2-98 퍼센타일 밝기 차이"""
    low, high = np.percentile(luma, [2, 98])
    return float(high - low)


def find_edge_crossings(oriented: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    행별 에지 교차 위치 (미분 크기 centroid, 피크 ±3 px)

    가장 강한 행 피크의 절반에 못 미치는 행은 제외.

    Returns:
        (행 인덱스, 서브픽셀 열 위치)
    """
    deriv = np.abs(np.gradient(oriented, axis=1))
    peaks = deriv.max(axis=1)
    strongest = float(peaks.max())
    if strongest <= 0.0:
        return np.zeros(0), np.zeros(0)

    width = oriented.shape[1]
    rows = []
    centroids = []
    for r in range(oriented.shape[0]):
        if peaks[r] < PEAK_REJECT_RATIO * strongest:
            continue
        peak = int(np.argmax(deriv[r]))
        start = max(0, peak - CENTROID_RADIUS)
        end = min(width, peak + CENTROID_RADIUS + 1)
        weights = deriv[r, start:end]
        mass = float(np.sum(weights))
        if mass <= 0.0:
            continue
        centroids.append(float(np.sum(np.arange(start, end) * weights) / mass))
        rows.append(r)

    return np.asarray(rows, dtype=np.float64), np.asarray(centroids, dtype=np.float64)


def detect_slanted_edge_angle(pixels: np.ndarray,
                              min_contrast: float = 10.0) -> float:
    """
    슬랜티드 에지 각도 검출

    Args:
        pixels: 영역 픽셀 (H, W) luma 또는 (H, W, 3|4) RGB(A)
        min_contrast: 에지로 인정할 최소 밝기 차이

    Returns:
        지배 축 대비 에지 각도 (radians)

    Raises:
        InsufficientSamplesError: 영역이 5 px 미만
        DegenerateEdgeError: 균일 영역, 교차점 부족, 축 정렬 에지
    """
    luma = _prepare_luma(pixels)

    contrast = edge_contrast(luma)
    if contrast < min_contrast:
        raise DegenerateEdgeError(
            f"에지 대비 부족: {contrast:.2f} < {min_contrast:.2f}")

    oriented, transposed = orient_edge(luma)
    rows, crossings = find_edge_crossings(oriented)

    if len(rows) < MIN_CROSSINGS:
        raise DegenerateEdgeError(
            f"안정적인 에지 교차점 부족: {len(rows)}개")
    if np.var(crossings) < 1e-6:
        raise DegenerateEdgeError("에지 교차점 분산이 0 (축 정렬 에지)")

    slope, _ = np.polyfit(rows, crossings, 1)
    angle = math.atan(slope)

    angle_deg = math.degrees(angle)
    if abs(angle_deg) < MIN_ANGLE_DEG:
        raise DegenerateEdgeError(
            f"에지가 축에 거의 정렬됨: {angle_deg:.3f}° < {MIN_ANGLE_DEG}°")
    if abs(angle_deg) > MAX_RECOMMENDED_ANGLE_DEG:
        logger.warning(f"에지 경사 {angle_deg:.1f}°: 권장 범위(2-10°) 초과")

    logger.debug(f"에지 각도: {angle_deg:.3f}° "
                 f"({'수평' if transposed else '수직'} 에지, 교차점 {len(rows)}개)")
    return angle


def extract_esf(pixels: np.ndarray, angle: float,
                oversampling: int = 4) -> EdgeSpreadFunction:
    """
    에지 법선 방향 투영으로 오버샘플링된 ESF 추출

    Args:
        pixels: 영역 픽셀
        angle: detect_slanted_edge_angle 결과 (radians)
        oversampling: bin 당 픽셀 분할 수

    Returns:
        빈 bin이 없는 EdgeSpreadFunction (위치 오름차순)
    """
    if oversampling < 1:
        raise InsufficientSamplesError(f"잘못된 오버샘플링: {oversampling}")

    luma = _prepare_luma(pixels)
    oriented, _ = orient_edge(luma)
    h, w = oriented.shape

    yy, xx = np.mgrid[0:h, 0:w].astype(np.float64)
    cx = (w - 1) / 2.0
    cy = (h - 1) / 2.0
    projected = (xx - cx) * math.cos(angle) - (yy - cy) * math.sin(angle)

    bins = np.floor(projected.ravel() * oversampling).astype(np.int64)
    offset = int(bins.min())
    bins -= offset
    n_bins = int(bins.max()) + 1

    if n_bins < 4 * oversampling:
        raise InsufficientSamplesError(
            f"ESF bin 부족: {n_bins} < {4 * oversampling}")

    sums = np.bincount(bins, weights=oriented.ravel(), minlength=n_bins)
    counts = np.bincount(bins, minlength=n_bins)

    positions = (np.arange(n_bins) + offset + 0.5) / oversampling
    filled = counts > 0
    intensities = np.zeros(n_bins, dtype=np.float64)
    intensities[filled] = sums[filled] / counts[filled]

    n_empty = int(n_bins - np.count_nonzero(filled))
    if n_empty > 0:
        intensities[~filled] = np.interp(positions[~filled],
                                         positions[filled], intensities[filled])
        logger.debug(f"ESF 빈 bin {n_empty}개 선형 보간")

    return EdgeSpreadFunction(positions=positions,
                              intensities=intensities,
                              oversampling=oversampling,
                              n_interpolated=n_empty)
