"""
색 공간 변환 / 색온도 / 화이트밸런스 테스트

사용법:
    python -m pytest tests/test_color_space.py -v
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import math
import pytest

from photometrics import PixelBuffer, NumericDomainError, Region
from photometrics.models import Lab, RgbSample
from photometrics.core.color_space import (
    rgb_to_lab,
    rgb_to_xyz,
    lab_to_rgb,
    xyz_to_xy,
    D65_XY,
)
from photometrics.core.color_temperature import (
    estimate_color_temperature,
    analyze_white_balance,
    mccamy_cct,
)
from synthetic_charts import SyntheticChartGenerator


def test_white_maps_to_l100():
    """sRGB 백색 → Lab(100, 0, 0)"""
    lab = rgb_to_lab(255, 255, 255)
    assert lab.l == pytest.approx(100.0, abs=1e-3)
    assert lab.a == pytest.approx(0.0, abs=1e-3)
    assert lab.b == pytest.approx(0.0, abs=1e-3)


def test_black_maps_to_l0():
    lab = rgb_to_lab(0, 0, 0)
    assert lab.l == pytest.approx(0.0, abs=1e-6)
    assert lab.chroma == pytest.approx(0.0, abs=1e-6)


def test_gray_is_neutral():
    """R = G = B 는 a, b ≈ 0"""
    for v in (10, 64, 128, 200):
        lab = rgb_to_lab(v, v, v)
        assert abs(lab.a) < 1e-2 and abs(lab.b) < 1e-2, f"{v}: {lab}"


def test_known_primary():
    """sRGB 빨강 Lab ≈ (53.24, 80.09, 67.20)"""
    lab = rgb_to_lab(255, 0, 0)
    assert lab.l == pytest.approx(53.24, abs=0.05)
    assert lab.a == pytest.approx(80.09, abs=0.1)
    assert lab.b == pytest.approx(67.20, abs=0.1)


def test_rgb_out_of_range_raises():
    with pytest.raises(NumericDomainError):
        rgb_to_lab(256, 0, 0)
    with pytest.raises(NumericDomainError):
        rgb_to_lab(-1, 0, 0)


def test_lab_to_rgb_inverse():
    """Lab → RGB → Lab 복원 (색역 안)"""
    for rgb in ((30, 60, 90), (200, 150, 100), (128, 128, 128)):
        restored = lab_to_rgb(rgb_to_lab(*rgb))
        assert restored.r == pytest.approx(rgb[0], abs=1e-3)
        assert restored.g == pytest.approx(rgb[1], abs=1e-3)
        assert restored.b == pytest.approx(rgb[2], abs=1e-3)


def test_lab_hue_undefined_for_neutral():
    assert Lab(50, 0, 0).hue == 0.0
    assert Lab(50, 0, -10).hue == pytest.approx(270.0)


def test_black_chromaticity_is_d65():
    assert xyz_to_xy(rgb_to_xyz(0, 0, 0)) == D65_XY


# =============================================================================
#  색온도
# =============================================================================

def test_d65_white_is_about_6500k():
    """sRGB 백색(D65) → 약 6504 K"""
    cct = estimate_color_temperature(RgbSample(255, 255, 255))
    assert 6400 < cct < 6600, f"CCT={cct:.0f}"


def test_warm_sample_is_lower():
    warm = estimate_color_temperature(RgbSample(255, 200, 150))
    cool = estimate_color_temperature(RgbSample(180, 200, 255))
    assert warm < 5000 < cool


def test_cct_is_always_finite():
    """검정, 원색 등 궤적 밖 입력도 유한한 값"""
    samples = [
        RgbSample(0, 0, 0),
        RgbSample(255, 0, 0),
        RgbSample(0, 255, 0),
        RgbSample(0, 0, 255),
        RgbSample(255, 0, 255),
        RgbSample(1, 0, 0),
    ]
    for sample in samples:
        assert math.isfinite(estimate_color_temperature(sample)), sample


def test_mccamy_epicenter_is_finite():
    assert math.isfinite(mccamy_cct(0.3, 0.1858))


def test_white_balance_neutral_patch():
    """중성 회색 패치: tint ≈ 0, 편차 = 측정 - 기준"""
    image = SyntheticChartGenerator().solid((80, 120), (180, 180, 180))
    result = analyze_white_balance(PixelBuffer.from_array(image))

    assert result.tint_deviation < 0.05
    assert result.temp_deviation == pytest.approx(result.measured_temp - 5500.0)
    assert result.avg_rgb.r == pytest.approx(180.0)


def test_white_balance_explicit_region():
    gen = SyntheticChartGenerator()
    image = gen.solid((50, 100), (255, 180, 120))
    image[:, 50:] = 180
    buffer = PixelBuffer.from_array(image)

    warm = analyze_white_balance(buffer, Region(0, 0, 50, 50), reference_temp=6500)
    neutral = analyze_white_balance(buffer, Region(50, 0, 50, 50), reference_temp=6500)

    assert warm.measured_temp < neutral.measured_temp
    assert warm.temp_deviation < 0
    assert warm.tint_deviation > neutral.tint_deviation
