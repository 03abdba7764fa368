"""
픽셀 버퍼 / 영역 처리

입력 버퍼는 row-major RGBA (픽셀당 4바이트).
영역 검증은 어떤 샘플링보다 먼저 수행됨.
"""

import math
import numpy as np
import cv2
from dataclasses import dataclass
from typing import Tuple, Union

from ..models.errors import InvalidRegionError, NumericDomainError
from ..models.results import Region, RgbSample

# ITU-R BT.601 luma 가중치
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


def luma_from_rgb(rgb: np.ndarray) -> np.ndarray:
    """(..., 3) RGB → luma"""
    rgb = np.asarray(rgb, dtype=np.float64)
    return rgb[..., 0] * LUMA_WEIGHTS[0] + rgb[..., 1] * LUMA_WEIGHTS[1] \
        + rgb[..., 2] * LUMA_WEIGHTS[2]


def to_luma(pixels: np.ndarray) -> np.ndarray:
    """
    영역 픽셀을 2D luma(float64)로 변환

    (H, W) 는 그대로, (H, W, 3|4) 는 RGB 채널만 사용.
    """
    pixels = np.asarray(pixels)
    if pixels.size == 0:
        raise NumericDomainError("빈 픽셀 배열")
    if pixels.ndim == 2:
        return pixels.astype(np.float64)
    if pixels.ndim == 3 and pixels.shape[2] in (3, 4):
        return luma_from_rgb(pixels[..., :3])
    raise NumericDomainError(f"지원하지 않는 픽셀 배열 형태: {pixels.shape}")


def validate_region(region: Region, image_width: int, image_height: int) -> None:
    """
    영역 유효성 검사

    Raises:
        InvalidRegionError: width/height <= 0, 비유한 좌표, 이미지 범위 밖
    """
    values = (region.x, region.y, region.width, region.height)
    if not all(math.isfinite(v) for v in values):
        raise InvalidRegionError(f"유한하지 않은 영역 좌표: {region}")
    if region.width <= 0 or region.height <= 0:
        raise InvalidRegionError(
            f"영역 크기는 양수여야 함: width={region.width}, "
            f"height={region.height}")
    if region.x < 0 or region.y < 0:
        raise InvalidRegionError(f"영역 원점이 이미지 밖: ({region.x}, {region.y})")
    if region.right > image_width or region.bottom > image_height:
        raise InvalidRegionError(
            f"영역이 이미지 범위({image_width}x{image_height})를 벗어남: "
            f"right={region.right}, bottom={region.bottom}")


def region_bounds(region: Region) -> Tuple[int, int, int, int]:
    """소수 영역 → 이를 포함하는 정수 픽셀 범위 (x0, y0, x1, y1)"""
    x0 = int(math.floor(region.x))
    y0 = int(math.floor(region.y))
    x1 = int(math.ceil(region.right))
    y1 = int(math.ceil(region.bottom))
    return x0, y0, max(x1, x0 + 1), max(y1, y0 + 1)


@dataclass(frozen=True)
class PixelBuffer:
    """읽기 전용 RGBA 픽셀 버퍼 (H, W, 4) uint8"""
    data: np.ndarray

    @classmethod
    def from_bytes(cls, raw: Union[bytes, bytearray, memoryview, np.ndarray],
                   width: int, height: int) -> 'PixelBuffer':
        """row-major RGBA 바이트열로부터 생성"""
        if width <= 0 or height <= 0:
            raise NumericDomainError(f"이미지 크기 오류: {width}x{height}")
        flat = np.frombuffer(bytes(raw), dtype=np.uint8) \
            if not isinstance(raw, np.ndarray) else raw.astype(np.uint8).ravel()
        if flat.size == 0:
            raise NumericDomainError("빈 픽셀 버퍼")
        expected = width * height * 4
        if flat.size != expected:
            raise NumericDomainError(
                f"버퍼 길이 불일치: {flat.size} != {width}x{height}x4")
        data = flat.reshape(height, width, 4).copy()
        data.setflags(write=False)
        return cls(data)

    @classmethod
    def from_array(cls, array: np.ndarray) -> 'PixelBuffer':
        """(H, W), (H, W, 3), (H, W, 4) 배열로부터 생성 (RGB 채널 순서)"""
        array = np.asarray(array)
        if array.size == 0:
            raise NumericDomainError("빈 픽셀 배열")
        if array.dtype != np.uint8:
            array = np.clip(np.round(array), 0, 255).astype(np.uint8)
        array = np.ascontiguousarray(array)

        if array.ndim == 2:
            rgba = cv2.cvtColor(array, cv2.COLOR_GRAY2RGBA)
        elif array.ndim == 3 and array.shape[2] == 3:
            rgba = cv2.cvtColor(array, cv2.COLOR_RGB2RGBA)
        elif array.ndim == 3 and array.shape[2] == 4:
            rgba = array.copy()
        else:
            raise NumericDomainError(f"지원하지 않는 배열 형태: {array.shape}")

        rgba.setflags(write=False)
        return cls(rgba)

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def full_region(self) -> Region:
        return Region(0.0, 0.0, float(self.width), float(self.height))

    def validate(self, region: Region) -> None:
        validate_region(region, self.width, self.height)

    def extract_rgb(self, region: Region) -> np.ndarray:
        """영역 RGB (h, w, 3) float64 복사본"""
        self.validate(region)
        x0, y0, x1, y1 = region_bounds(region)
        x1 = min(x1, self.width)
        y1 = min(y1, self.height)
        return self.data[y0:y1, x0:x1, :3].astype(np.float64)

    def extract_luma(self, region: Region) -> np.ndarray:
        """영역 luma (h, w) float64"""
        return luma_from_rgb(self.extract_rgb(region))

    def average_rgb(self, region: Region) -> RgbSample:
        """영역 평균 RGB"""
        rgb = self.extract_rgb(region).reshape(-1, 3)
        mean = rgb.mean(axis=0)
        return RgbSample(float(mean[0]), float(mean[1]), float(mean[2]))
