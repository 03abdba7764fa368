"""
색 공간 변환 (sRGB ↔ XYZ ↔ CIE Lab, D65 / 2° 관찰자)

RGB 입력은 0-255 스케일 실수 (영역 평균이므로 정수가 아님).
XYZ는 백색 Y = 100 스케일.
"""

import math
import numpy as np
from typing import Tuple

from ..models.errors import NumericDomainError
from ..models.results import Lab, XYZ, RgbSample

# D65 기준 백색
REF_WHITE_D65 = XYZ(95.047, 100.0, 108.883)

# D65 백색점 색도 좌표 (x, y)
D65_XY = (0.3127, 0.3290)

SRGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
], dtype=np.float64)

XYZ_TO_SRGB = np.array([
    [3.2404542, -1.5371385, -0.4985314],
    [-0.9692660, 1.8760108, 0.0415560],
    [0.0556434, -0.2040259, 1.0572252],
], dtype=np.float64)

_DELTA = 6.0 / 29.0


# ===== sRGB 감마 =====

def srgb_to_linear(value: float) -> float:
    """sRGB 역 컴팬딩 (0-1)"""
    if value > 0.04045:
        return ((value + 0.055) / 1.055) ** 2.4
    return value / 12.92


def linear_to_srgb(value: float) -> float:
    """sRGB 컴팬딩 (0-1)"""
    if value > 0.0031308:
        return 1.055 * value ** (1.0 / 2.4) - 0.055
    return 12.92 * value


def _lab_f(t: float) -> float:
    if t > _DELTA ** 3:
        return t ** (1.0 / 3.0)
    return t / (3.0 * _DELTA ** 2) + 4.0 / 29.0


def _lab_f_inverse(t: float) -> float:
    if t > _DELTA:
        return t ** 3
    return 3.0 * _DELTA ** 2 * (t - 4.0 / 29.0)


def _check_rgb(r: float, g: float, b: float) -> None:
    for name, v in (('r', r), ('g', g), ('b', b)):
        if not (0.0 <= v <= 255.0):
            raise NumericDomainError(f"RGB 값이 [0, 255] 범위 밖: {name}={v}")


# ===== 변환 =====

def rgb_to_xyz(r: float, g: float, b: float) -> XYZ:
    """sRGB (0-255) → XYZ (Y=100)"""
    _check_rgb(r, g, b)
    linear = np.array([srgb_to_linear(r / 255.0),
                       srgb_to_linear(g / 255.0),
                       srgb_to_linear(b / 255.0)])
    x, y, z = SRGB_TO_XYZ @ linear * 100.0
    return XYZ(float(x), float(y), float(z))


def xyz_to_lab(xyz: XYZ, white: XYZ = REF_WHITE_D65) -> Lab:
    """
    XYZ → Lab

    검정 근처에서 행렬 곱 결과가 미세하게 음수가 될 수 있으므로
    비선형 함수 적용 전 0으로 클램프.
    """
    xn = max(xyz.x, 0.0) / white.x
    yn = max(xyz.y, 0.0) / white.y
    zn = max(xyz.z, 0.0) / white.z

    fx, fy, fz = _lab_f(xn), _lab_f(yn), _lab_f(zn)

    l = 116.0 * fy - 16.0
    return Lab(l=min(max(l, 0.0), 100.0),
               a=500.0 * (fx - fy),
               b=200.0 * (fy - fz))


def rgb_to_lab(r: float, g: float, b: float) -> Lab:
    """sRGB (0-255) → Lab (D65)"""
    return xyz_to_lab(rgb_to_xyz(r, g, b))


def sample_to_lab(sample: RgbSample) -> Lab:
    return rgb_to_lab(sample.r, sample.g, sample.b)


def lab_to_xyz(lab: Lab, white: XYZ = REF_WHITE_D65) -> XYZ:
    """Lab → XYZ"""
    fy = (lab.l + 16.0) / 116.0
    fx = lab.a / 500.0 + fy
    fz = fy - lab.b / 200.0
    return XYZ(_lab_f_inverse(fx) * white.x,
               _lab_f_inverse(fy) * white.y,
               _lab_f_inverse(fz) * white.z)


def xyz_to_rgb(xyz: XYZ) -> RgbSample:
    """XYZ → sRGB (0-255, 색역 밖은 클립)"""
    linear = XYZ_TO_SRGB @ np.array([xyz.x, xyz.y, xyz.z]) / 100.0
    rgb = [min(max(linear_to_srgb(float(v)) * 255.0, 0.0), 255.0)
           for v in linear]
    return RgbSample(*rgb)


def lab_to_rgb(lab: Lab) -> RgbSample:
    """Lab → sRGB (0-255)"""
    return xyz_to_rgb(lab_to_xyz(lab))


def xyz_to_xy(xyz: XYZ) -> Tuple[float, float]:
    """
    XYZ → 색도 좌표 (x, y)

    X+Y+Z = 0 (검정)이면 색도가 정의되지 않으므로 D65 백색점 반환.
    """
    total = xyz.x + xyz.y + xyz.z
    if total <= 0.0 or not math.isfinite(total):
        return D65_XY
    return xyz.x / total, xyz.y / total
