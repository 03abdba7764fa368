"""
상관 색온도(CCT) 추정 및 화이트밸런스 평가

McCamy (1992) 3차 근사식:
    n = (x - 0.3320) / (0.1858 - y)
    CCT = 449 n³ + 3525 n² + 6823.3 n + 5520.33
"""

from typing import Optional

from ..models.results import RgbSample, Region, WhiteBalanceResult
from ..utils.logger import logger
from .buffer import PixelBuffer
from .color_space import rgb_to_xyz, xyz_to_xy, sample_to_lab

# McCamy 근사 epicenter
MCCAMY_XE = 0.3320
MCCAMY_YE = 0.1858

# 근사식의 유효 범위 (로그용)
CCT_VALID_RANGE = (2000.0, 12500.0)

DEFAULT_REFERENCE_TEMP = 5500.0


def mccamy_cct(x: float, y: float) -> float:
    """색도 좌표 (x, y) → CCT (K)"""
    denominator = MCCAMY_YE - y
    if abs(denominator) < 1e-9:
        # epicenter 위의 y는 분모가 0이 되므로 미세 보정
        denominator = -1e-9 if denominator <= 0 else 1e-9
    n = (x - MCCAMY_XE) / denominator
    return 449.0 * n ** 3 + 3525.0 * n ** 2 + 6823.3 * n + 5520.33


def estimate_color_temperature(avg_rgb: RgbSample) -> float:
    """
    평균 RGB로부터 상관 색온도 추정

    항상 유한한 값을 반환함. 검정 입력은 D65 백색점으로 간주.
    흑체 궤적에서 먼 색(채도가 높은 샘플)은 근사식 결과를 그대로 반환하며
    클램프하지 않음.

    Args:
        avg_rgb: 영역 평균 RGB (0-255)

    Returns:
        CCT (Kelvin)
    """
    xyz = rgb_to_xyz(avg_rgb.r, avg_rgb.g, avg_rgb.b)
    x, y = xyz_to_xy(xyz)
    cct = mccamy_cct(x, y)

    low, high = CCT_VALID_RANGE
    if not (low <= cct <= high):
        logger.debug(f"CCT {cct:.0f}K: 근사 유효 범위({low:.0f}-{high:.0f}K) 밖")
    return float(cct)


def central_region(buffer: PixelBuffer, fraction: float = 0.5) -> Region:
    """이미지 중앙 fraction 영역"""
    margin = (1.0 - fraction) / 2.0
    return Region.from_fractions(margin, margin, fraction, fraction,
                                 buffer.width, buffer.height)


def analyze_white_balance(buffer: PixelBuffer,
                          region: Optional[Region] = None,
                          reference_temp: float = DEFAULT_REFERENCE_TEMP
                          ) -> WhiteBalanceResult:
    """
    회색/백색 패치의 화이트밸런스 평가

    Args:
        buffer: RGBA 픽셀 버퍼
        region: 중성 패치 영역 (None이면 이미지 중앙 50%)
        reference_temp: 기준 색온도 (K)

    Returns:
        WhiteBalanceResult
    """
    if region is None:
        region = central_region(buffer)

    avg_rgb = buffer.average_rgb(region)
    avg_lab = sample_to_lab(avg_rgb)
    measured_temp = estimate_color_temperature(avg_rgb)

    result = WhiteBalanceResult(
        measured_temp=measured_temp,
        reference_temp=reference_temp,
        temp_deviation=measured_temp - reference_temp,
        tint_deviation=avg_lab.chroma,
        avg_rgb=avg_rgb,
        avg_lab=avg_lab,
    )

    logger.info(f"화이트밸런스: {measured_temp:.0f}K "
                f"(편차 {result.temp_deviation:+.0f}K, "
                f"틴트 {result.tint_deviation:.2f})")
    return result
