"""
색차 계산 모듈 (CIEDE2000) 및 컬러 차트 평가

References:
- Sharma, Wu, Dalal (2005) "The CIEDE2000 color-difference formula:
  Implementation notes, supplementary test data, and mathematical observations"
  Color Research & Application, 30(1), 21-30.
"""

import math
import time
import numpy as np
from typing import List, Optional, Sequence, Tuple
from numba import jit, prange

from ..models.errors import NumericDomainError
from ..models.results import Lab, ColorPatch, ColorAccuracyResult, Region
from ..utils.logger import logger
from .buffer import PixelBuffer
from .color_space import sample_to_lab

_POW25_7 = 25.0 ** 7

# hue 편차 계산에서 제외할 기준 chroma 상한 (무채색 패치)
HUE_BIAS_MIN_CHROMA = 10.0


# ===== Numba CIEDE2000 =====

@jit(nopython=True, cache=True)
def _delta_e_2000_scalar(l1: float, a1: float, b1: float,
                         l2: float, a2: float, b2: float,
                         k_l: float, k_c: float, k_h: float) -> float:
    """단일 쌍 CIEDE2000 (Sharma et al. 2005 Eq. 1-22)"""
    c1 = math.sqrt(a1 * a1 + b1 * b1)
    c2 = math.sqrt(a2 * a2 + b2 * b2)
    c_bar = (c1 + c2) * 0.5
    c_bar7 = c_bar ** 7
    g = 0.5 * (1.0 - math.sqrt(c_bar7 / (c_bar7 + _POW25_7)))

    a1p = (1.0 + g) * a1
    a2p = (1.0 + g) * a2
    c1p = math.sqrt(a1p * a1p + b1 * b1)
    c2p = math.sqrt(a2p * a2p + b2 * b2)

    # chroma 0 이면 hue 미정의 → 0
    if c1p == 0.0:
        h1p = 0.0
    else:
        h1p = math.degrees(math.atan2(b1, a1p))
        if h1p < 0.0:
            h1p += 360.0
    if c2p == 0.0:
        h2p = 0.0
    else:
        h2p = math.degrees(math.atan2(b2, a2p))
        if h2p < 0.0:
            h2p += 360.0

    dlp = l2 - l1
    dcp = c2p - c1p

    c_prod = c1p * c2p
    if c_prod == 0.0:
        dhp = 0.0
    else:
        dhp = h2p - h1p
        if dhp > 180.0:
            dhp -= 360.0
        elif dhp < -180.0:
            dhp += 360.0
    d_hp = 2.0 * math.sqrt(c_prod) * math.sin(math.radians(dhp) * 0.5)

    l_bar_p = (l1 + l2) * 0.5
    c_bar_p = (c1p + c2p) * 0.5

    if c_prod == 0.0:
        h_bar_p = h1p + h2p
    elif abs(h1p - h2p) <= 180.0:
        h_bar_p = (h1p + h2p) * 0.5
    elif h1p + h2p < 360.0:
        h_bar_p = (h1p + h2p + 360.0) * 0.5
    else:
        h_bar_p = (h1p + h2p - 360.0) * 0.5

    t = (1.0
         - 0.17 * math.cos(math.radians(h_bar_p - 30.0))
         + 0.24 * math.cos(math.radians(2.0 * h_bar_p))
         + 0.32 * math.cos(math.radians(3.0 * h_bar_p + 6.0))
         - 0.20 * math.cos(math.radians(4.0 * h_bar_p - 63.0)))

    d_theta = 30.0 * math.exp(-((h_bar_p - 275.0) / 25.0) ** 2)
    c_bar_p7 = c_bar_p ** 7
    r_c = 2.0 * math.sqrt(c_bar_p7 / (c_bar_p7 + _POW25_7))

    l_term = (l_bar_p - 50.0) ** 2
    s_l = 1.0 + 0.015 * l_term / math.sqrt(20.0 + l_term)
    s_c = 1.0 + 0.045 * c_bar_p
    s_h = 1.0 + 0.015 * c_bar_p * t
    r_t = -math.sin(math.radians(2.0 * d_theta)) * r_c

    tl = dlp / (k_l * s_l)
    tc = dcp / (k_c * s_c)
    th = d_hp / (k_h * s_h)

    return math.sqrt(max(tl * tl + tc * tc + th * th + r_t * tc * th, 0.0))


@jit(nopython=True, parallel=True, cache=True)
def _delta_e_2000_parallel(lab1: np.ndarray, lab2: np.ndarray,
                           k_l: float, k_c: float, k_h: float) -> np.ndarray:
    """(N, 3) 쌍 병렬 CIEDE2000"""
    n = lab1.shape[0]
    out = np.empty(n, dtype=np.float64)
    for i in prange(n):
        out[i] = _delta_e_2000_scalar(lab1[i, 0], lab1[i, 1], lab1[i, 2],
                                      lab2[i, 0], lab2[i, 1], lab2[i, 2],
                                      k_l, k_c, k_h)
    return out


# ===== 공개 API =====

def delta_e_2000(reference: Lab, measured: Lab,
                 k_l: float = 1.0, k_c: float = 1.0, k_h: float = 1.0) -> float:
    """
    CIEDE2000 색차

    Args:
        reference: 기준 Lab
        measured: 측정 Lab
        k_l, k_c, k_h: 파라메트릭 가중치 (기본 1.0)

    Returns:
        ΔE00 (>= 0), 인자 순서에 대해 대칭
    """
    return float(_delta_e_2000_scalar(
        float(reference.l), float(reference.a), float(reference.b),
        float(measured.l), float(measured.a), float(measured.b),
        k_l, k_c, k_h))


def delta_e_2000_batch(reference: Sequence[Lab],
                       measured: Sequence[Lab]) -> np.ndarray:
    """여러 쌍의 CIEDE2000 (길이가 같아야 함)"""
    if len(reference) != len(measured):
        raise NumericDomainError(
            f"Lab 목록 길이 불일치: {len(reference)} != {len(measured)}")
    if len(reference) == 0:
        return np.zeros(0, dtype=np.float64)
    ref = np.array([[c.l, c.a, c.b] for c in reference], dtype=np.float64)
    meas = np.array([[c.l, c.a, c.b] for c in measured], dtype=np.float64)
    return _delta_e_2000_parallel(ref, meas, 1.0, 1.0, 1.0)


def _check_pair_lengths(measured: Sequence[Lab], reference: Sequence[Lab]) -> None:
    if len(measured) != len(reference):
        raise NumericDomainError(
            f"측정/기준 목록 길이 불일치: {len(measured)} != {len(reference)}")


def calculate_saturation_bias(measured: Sequence[Lab],
                              reference: Sequence[Lab]) -> float:
    """
    채도 편차 (%)

    (avgChroma(measured) − avgChroma(reference)) / avgChroma(reference) × 100
    기준 평균 chroma가 0이면 0.0 반환.
    """
    _check_pair_lengths(measured, reference)
    if len(measured) == 0:
        return 0.0

    avg_measured = float(np.mean([c.chroma for c in measured]))
    avg_reference = float(np.mean([c.chroma for c in reference]))
    if avg_reference <= 0.0:
        return 0.0
    return (avg_measured - avg_reference) / avg_reference * 100.0


def wrap_hue_difference(diff: float) -> float:
    """hue 차이를 (-180, 180] 로 래핑"""
    wrapped = math.fmod(diff, 360.0)
    if wrapped > 180.0:
        wrapped -= 360.0
    elif wrapped <= -180.0:
        wrapped += 360.0
    return wrapped


def circular_mean_deg(angles: Sequence[float]) -> float:
    """
    각도 원형 평균 (-180, 180]

    359°와 1°의 평균은 180°가 아니라 0°.
    벡터 합이 0이면 (정반대 방향) 0.0 반환.
    """
    if len(angles) == 0:
        return 0.0
    rad = np.radians(np.asarray(angles, dtype=np.float64))
    s = float(np.mean(np.sin(rad)))
    c = float(np.mean(np.cos(rad)))
    if math.hypot(s, c) < 1e-12:
        return 0.0
    return wrap_hue_difference(math.degrees(math.atan2(s, c)))


def calculate_hue_bias(measured: Sequence[Lab],
                       reference: Sequence[Lab]) -> float:
    """
    평균 hue 편차 (도)

    패치별 hue 차이를 (-180, 180] 로 래핑 후 원형 평균.
    기준 chroma가 HUE_BIAS_MIN_CHROMA 이하인 무채색 패치는 제외.
    """
    _check_pair_lengths(measured, reference)

    deviations = []
    for m, r in zip(measured, reference):
        if r.chroma <= HUE_BIAS_MIN_CHROMA:
            continue
        deviations.append(wrap_hue_difference(m.hue - r.hue))

    if not deviations:
        return 0.0
    return circular_mean_deg(deviations)


def rate_delta_e(delta_e: float) -> str:
    """ΔE 등급"""
    if delta_e < 1.0:
        return "Excellent"
    if delta_e < 3.0:
        return "Good"
    if delta_e < 5.0:
        return "Acceptable"
    if delta_e < 10.0:
        return "Poor"
    return "Bad"


# ===== ColorChecker 평가 =====

# X-Rite ColorChecker Classic 24 기준값 (행 우선, 4 x 6)
COLORCHECKER_REFERENCE: List[Tuple[str, Lab]] = [
    ("Dark Skin", Lab(37.986, 13.555, 14.059)),
    ("Light Skin", Lab(65.711, 18.130, 17.810)),
    ("Blue Sky", Lab(49.927, -4.880, -21.925)),
    ("Foliage", Lab(43.139, -13.095, 21.905)),
    ("Blue Flower", Lab(55.112, 8.844, -25.399)),
    ("Bluish Green", Lab(70.719, -33.397, -0.199)),
    ("Orange", Lab(62.661, 36.067, 57.096)),
    ("Purplish Blue", Lab(40.020, 10.410, -45.964)),
    ("Moderate Red", Lab(51.124, 48.239, 16.248)),
    ("Purple", Lab(30.325, 22.976, -21.587)),
    ("Yellow Green", Lab(72.532, -23.709, 57.255)),
    ("Orange Yellow", Lab(71.941, 19.363, 67.857)),
    ("Blue", Lab(28.778, 14.179, -50.297)),
    ("Green", Lab(55.261, -38.342, 31.370)),
    ("Red", Lab(42.101, 53.378, 28.190)),
    ("Yellow", Lab(81.733, 4.039, 79.819)),
    ("Magenta", Lab(51.935, 49.986, -14.574)),
    ("Cyan", Lab(51.038, -28.631, -28.638)),
    ("White", Lab(96.539, -0.425, 1.186)),
    ("Neutral 8", Lab(81.257, -0.638, -0.335)),
    ("Neutral 6.5", Lab(66.766, -0.734, -0.504)),
    ("Neutral 5", Lab(50.867, -0.153, -0.270)),
    ("Neutral 3.5", Lab(35.656, -0.421, -1.231)),
    ("Black", Lab(20.461, -0.079, -0.973)),
]


def analyze_color_checker(buffer: PixelBuffer,
                          region: Optional[Region] = None,
                          rows: int = 4,
                          cols: int = 6,
                          sample_fraction: float = 0.5,
                          reference: Optional[Sequence[Tuple[str, Lab]]] = None
                          ) -> ColorAccuracyResult:
    """
    컬러 차트 색 정확도 평가

    차트 영역을 rows x cols 셀로 나누고, 각 셀 중앙의
    (셀 짧은 변 × sample_fraction) 정사각형 평균 색을 측정.

    Args:
        buffer: RGBA 픽셀 버퍼
        region: 차트 영역 (None이면 이미지 전체)
        rows, cols: 차트 격자
        sample_fraction: 셀 대비 샘플 크기 비율
        reference: (이름, Lab) 목록 (기본 ColorChecker 24)
    """
    start_time = time.time()

    if region is None:
        region = buffer.full_region
    buffer.validate(region)

    if reference is None:
        reference = COLORCHECKER_REFERENCE
    if len(reference) != rows * cols:
        raise NumericDomainError(
            f"기준 패치 수({len(reference)})가 격자({rows}x{cols})와 다름")

    cell_w = region.width / cols
    cell_h = region.height / rows
    sample_size = min(cell_w, cell_h) * sample_fraction

    patches: List[ColorPatch] = []
    for row in range(rows):
        for col in range(cols):
            idx = row * cols + col
            cx = region.x + (col + 0.5) * cell_w
            cy = region.y + (row + 0.5) * cell_h
            sample_region = Region(cx - sample_size / 2, cy - sample_size / 2,
                                   sample_size, sample_size)

            measured = sample_to_lab(buffer.average_rgb(sample_region))
            name, ref_lab = reference[idx]
            patches.append(ColorPatch(
                id=idx + 1,
                name=name,
                reference=ref_lab,
                measured=measured,
                delta_e=delta_e_2000(ref_lab, measured),
            ))

    delta_es = [p.delta_e for p in patches]
    measured_labs = [p.measured for p in patches]
    reference_labs = [p.reference for p in patches]

    result = ColorAccuracyResult(
        patches=patches,
        average_delta_e=float(np.mean(delta_es)),
        max_delta_e=float(np.max(delta_es)),
        saturation_bias=calculate_saturation_bias(measured_labs, reference_labs),
        hue_bias=calculate_hue_bias(measured_labs, reference_labs),
    )

    logger.info(
        f"컬러 차트 평가 완료: 평균 ΔE={result.average_delta_e:.2f}, "
        f"최대 ΔE={result.max_delta_e:.2f}, "
        f"처리시간={time.time() - start_time:.3f}s")
    return result


def warmup_numba():
    """Numba JIT 워밍업"""
    dummy = np.array([[50.0, 10.0, -10.0]], dtype=np.float64)
    _delta_e_2000_parallel(dummy, dummy, 1.0, 1.0, 1.0)
