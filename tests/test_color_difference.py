"""
CIEDE2000 색차 및 편차 통계 검증 테스트

검증 항목:
    1. Sharma et al. (2005) 34쌍 기준 데이터 (오차 1e-4)
    2. 동일 색 ΔE = 0, 인자 순서 대칭
    3. 병렬 배치 계산 = 단일 계산
    4. 채도/색상 편차 (hue 래핑, 원형 평균)
    5. 합성 ColorChecker 평가

사용법:
    python -m pytest tests/test_color_difference.py -v
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import math
import numpy as np
import pytest

from photometrics import PixelBuffer, NumericDomainError
from photometrics.models import Lab
from photometrics.core.color_difference import (
    COLORCHECKER_REFERENCE,
    delta_e_2000,
    delta_e_2000_batch,
    calculate_saturation_bias,
    calculate_hue_bias,
    circular_mean_deg,
    wrap_hue_difference,
    rate_delta_e,
    analyze_color_checker,
)
from synthetic_charts import SyntheticChartGenerator


# (L1, a1, b1, L2, a2, b2, ΔE00)
SHARMA_PAIRS = [
    (50.0000, 2.6772, -79.7751, 50.0000, 0.0000, -82.7485, 2.0425),
    (50.0000, 3.1571, -77.2803, 50.0000, 0.0000, -82.7485, 2.8615),
    (50.0000, 2.8361, -74.0200, 50.0000, 0.0000, -82.7485, 3.4412),
    (50.0000, -1.3802, -84.2814, 50.0000, 0.0000, -82.7485, 1.0000),
    (50.0000, -1.1848, -84.8006, 50.0000, 0.0000, -82.7485, 1.0000),
    (50.0000, -0.9009, -85.5211, 50.0000, 0.0000, -82.7485, 1.0000),
    (50.0000, 0.0000, 0.0000, 50.0000, -1.0000, 2.0000, 2.3669),
    (50.0000, -1.0000, 2.0000, 50.0000, 0.0000, 0.0000, 2.3669),
    (50.0000, 2.4900, -0.0010, 50.0000, -2.4900, 0.0009, 7.1792),
    (50.0000, 2.4900, -0.0010, 50.0000, -2.4900, 0.0010, 7.1792),
    (50.0000, 2.4900, -0.0010, 50.0000, -2.4900, 0.0011, 7.2195),
    (50.0000, 2.4900, -0.0010, 50.0000, -2.4900, 0.0012, 7.2195),
    (50.0000, -0.0010, 2.4900, 50.0000, 0.0009, -2.4900, 4.8045),
    (50.0000, -0.0010, 2.4900, 50.0000, 0.0010, -2.4900, 4.8045),
    (50.0000, -0.0010, 2.4900, 50.0000, 0.0011, -2.4900, 4.7461),
    (50.0000, 2.5000, 0.0000, 50.0000, 0.0000, -2.5000, 4.3065),
    (50.0000, 2.5000, 0.0000, 73.0000, 25.0000, -18.0000, 27.1492),
    (50.0000, 2.5000, 0.0000, 61.0000, -5.0000, 29.0000, 22.8977),
    (50.0000, 2.5000, 0.0000, 56.0000, -27.0000, -3.0000, 31.9030),
    (50.0000, 2.5000, 0.0000, 58.0000, 24.0000, 15.0000, 19.4535),
    (50.0000, 2.5000, 0.0000, 50.0000, 3.1736, 0.5854, 1.0000),
    (50.0000, 2.5000, 0.0000, 50.0000, 3.2972, 0.0000, 1.0000),
    (50.0000, 2.5000, 0.0000, 50.0000, 1.8634, 0.5757, 1.0000),
    (50.0000, 2.5000, 0.0000, 50.0000, 3.2592, 0.3350, 1.0000),
    (60.2574, -34.0099, 36.2677, 60.4626, -34.1751, 39.4387, 1.2644),
    (63.0109, -31.0961, -5.8663, 62.8187, -29.7946, -4.0864, 1.2630),
    (61.2901, 3.7196, -5.3901, 61.4292, 2.2480, -4.9620, 1.8731),
    (35.0831, -44.1164, 3.7933, 35.0232, -40.0716, 1.5901, 1.8645),
    (22.7233, 20.0904, -46.6940, 23.0331, 14.9730, -42.5619, 2.0373),
    (36.4612, 47.8580, 18.3852, 36.2715, 50.5065, 21.2231, 1.4146),
    (90.8027, -2.0831, 1.4410, 91.1528, -1.6435, 0.0447, 1.4441),
    (90.9257, -0.5406, -0.9208, 88.6381, -0.8985, -0.7239, 1.5381),
    (6.7747, -0.2908, -2.4247, 5.8714, -0.0985, -2.2286, 0.6377),
    (2.0776, 0.0795, -1.1350, 0.9033, -0.0636, -0.5514, 0.9082),
]


def _lab_from_polar(l: float, chroma: float, hue_deg: float) -> Lab:
    h = math.radians(hue_deg)
    return Lab(l, chroma * math.cos(h), chroma * math.sin(h))


# =============================================================================
#  1. CIEDE2000
# =============================================================================

@pytest.mark.parametrize("pair", SHARMA_PAIRS)
def test_sharma_reference_pairs(pair):
    """Sharma 2005 표 1 기준값과 4자리 일치"""
    l1, a1, b1, l2, a2, b2, expected = pair
    result = delta_e_2000(Lab(l1, a1, b1), Lab(l2, a2, b2))
    assert abs(result - expected) < 1e-4, \
        f"ΔE00={result:.6f}, expected={expected}"


def test_identity_is_zero():
    """동일 색의 ΔE = 0"""
    for _, lab in COLORCHECKER_REFERENCE:
        assert delta_e_2000(lab, lab) == pytest.approx(0.0, abs=1e-12)
    assert delta_e_2000(Lab(0, 0, 0), Lab(0, 0, 0)) == 0.0


def test_symmetry():
    """ΔE(A, B) == ΔE(B, A)"""
    for l1, a1, b1, l2, a2, b2, _ in SHARMA_PAIRS:
        forward = delta_e_2000(Lab(l1, a1, b1), Lab(l2, a2, b2))
        backward = delta_e_2000(Lab(l2, a2, b2), Lab(l1, a1, b1))
        assert forward == pytest.approx(backward, abs=1e-10)


def test_neutral_pair_has_no_hue_term():
    """chroma 0 쌍은 명도 차이만 반영 (atan2(0,0) 미사용)"""
    result = delta_e_2000(Lab(50, 0, 0), Lab(60, 0, 0))
    assert math.isfinite(result)
    assert result > 0


def test_batch_matches_scalar():
    """병렬 배치 결과 = 단일 호출 결과"""
    ref = [Lab(p[0], p[1], p[2]) for p in SHARMA_PAIRS]
    meas = [Lab(p[3], p[4], p[5]) for p in SHARMA_PAIRS]
    batch = delta_e_2000_batch(ref, meas)
    single = np.array([delta_e_2000(r, m) for r, m in zip(ref, meas)])
    np.testing.assert_allclose(batch, single, atol=1e-12)


def test_batch_length_mismatch_raises():
    with pytest.raises(NumericDomainError):
        delta_e_2000_batch([Lab(50, 0, 0)], [])


def test_rate_delta_e():
    assert rate_delta_e(0.5) == "Excellent"
    assert rate_delta_e(1.0) == "Good"
    assert rate_delta_e(4.9) == "Acceptable"
    assert rate_delta_e(5.0) == "Poor"
    assert rate_delta_e(12.0) == "Bad"


# =============================================================================
#  2. 채도 / 색상 편차
# =============================================================================

def test_saturation_bias_percent():
    """측정 chroma가 10% 높으면 +10%"""
    reference = [_lab_from_polar(50, 40, h) for h in (0, 90, 180)]
    measured = [_lab_from_polar(50, 44, h) for h in (0, 90, 180)]
    assert calculate_saturation_bias(measured, reference) == pytest.approx(10.0)


def test_saturation_bias_zero_reference_chroma():
    """기준 평균 chroma 0 이면 0.0"""
    neutral = [Lab(50, 0, 0), Lab(70, 0, 0)]
    assert calculate_saturation_bias([Lab(50, 5, 5)] * 2, neutral) == 0.0
    assert calculate_saturation_bias([], []) == 0.0


def test_saturation_bias_length_mismatch():
    with pytest.raises(NumericDomainError):
        calculate_saturation_bias([Lab(50, 1, 1)], [])


def test_hue_bias_identity():
    """측정 = 기준이면 hue 편차 0"""
    labs = [lab for _, lab in COLORCHECKER_REFERENCE]
    assert calculate_hue_bias(labs, labs) == pytest.approx(0.0, abs=1e-9)


def test_hue_bias_wraps_at_zero():
    """기준 359°, 측정 1° 는 +2° (−358° 아님)"""
    reference = [_lab_from_polar(50, 30, 359.0)]
    measured = [_lab_from_polar(50, 30, 1.0)]
    assert calculate_hue_bias(measured, reference) == pytest.approx(2.0, abs=1e-6)


def test_hue_bias_skips_neutral_patches():
    """기준 chroma <= 10 패치는 제외"""
    reference = [_lab_from_polar(50, 30, 40.0), _lab_from_polar(50, 5, 40.0)]
    measured = [_lab_from_polar(50, 30, 43.0), _lab_from_polar(50, 5, 120.0)]
    assert calculate_hue_bias(measured, reference) == pytest.approx(3.0, abs=1e-6)


def test_circular_mean_359_and_1():
    """359°와 1°의 평균은 180°가 아니라 0°"""
    assert circular_mean_deg([359.0, 1.0]) == pytest.approx(0.0, abs=1e-9)
    assert circular_mean_deg([350.0, 20.0]) == pytest.approx(5.0, abs=1e-9)
    assert circular_mean_deg([]) == 0.0


def test_wrap_hue_difference_range():
    for diff in (-540.0, -181.0, -180.0, 0.0, 180.0, 181.0, 359.0, 720.0):
        wrapped = wrap_hue_difference(diff)
        assert -180.0 < wrapped <= 180.0, f"{diff} → {wrapped}"


# =============================================================================
#  3. ColorChecker 평가
# =============================================================================

def test_analyze_rendered_color_checker():
    """기준 Lab을 sRGB로 렌더링한 차트는 ΔE가 작아야 함"""
    chart = SyntheticChartGenerator().color_checker(COLORCHECKER_REFERENCE)
    buffer = PixelBuffer.from_array(chart)

    result = analyze_color_checker(buffer)

    assert result.n_patches == 24
    assert [p.id for p in result.patches] == list(range(1, 25))
    assert result.patches[0].name == "Dark Skin"
    assert result.average_delta_e < 2.0, f"평균 ΔE={result.average_delta_e:.3f}"
    # 무채색 패치는 sRGB 색역 안이므로 양자화 오차만 남음
    for patch in result.patches[18:]:
        assert patch.delta_e < 1.0, f"{patch.name}: ΔE={patch.delta_e:.3f}"
    assert abs(result.saturation_bias) < 5.0
    assert abs(result.hue_bias) < 3.0
    assert result.worst_patch.delta_e == result.max_delta_e


def test_color_checker_grid_mismatch_raises():
    buffer = PixelBuffer.from_array(np.zeros((40, 60, 3), dtype=np.uint8))
    with pytest.raises(NumericDomainError):
        analyze_color_checker(buffer, rows=2, cols=2)
