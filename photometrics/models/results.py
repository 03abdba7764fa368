"""
측정 데이터 모델

모든 값은 호출 1회마다 새로 계산되는 일시적 객체이며,
코어는 계산이 끝난 뒤 어떤 상태도 보관하지 않음.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Tuple, Any
import math
import numpy as np

from .errors import RegionAnalysisError


# ===== 색 공간 =====

@dataclass(frozen=True)
class RgbSample:
    """영역 평균 RGB (0-255, 실수)"""
    r: float
    g: float
    b: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class XYZ:
    """CIE XYZ (백색 Y = 100)"""
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class Lab:
    """CIE Lab (D65)"""
    l: float
    a: float
    b: float

    @property
    def chroma(self) -> float:
        return math.hypot(self.a, self.b)

    @property
    def hue(self) -> float:
        """색상각 [0, 360), chroma가 0이면 0.0"""
        if self.a == 0.0 and self.b == 0.0:
            return 0.0
        return math.degrees(math.atan2(self.b, self.a)) % 360.0

    def as_array(self) -> np.ndarray:
        return np.array([self.l, self.a, self.b], dtype=np.float64)


@dataclass(frozen=True)
class ColorPatch:
    """차트 셀 1개의 기준/측정 Lab 및 ΔE2000"""
    id: int
    name: str
    reference: Lab
    measured: Lab
    delta_e: float


@dataclass
class ColorAccuracyResult:
    """컬러 차트 전체 평가 결과"""
    patches: List[ColorPatch]
    average_delta_e: float
    max_delta_e: float
    saturation_bias: float
    hue_bias: float

    @property
    def n_patches(self) -> int:
        return len(self.patches)

    @property
    def worst_patch(self) -> Optional[ColorPatch]:
        if not self.patches:
            return None
        return max(self.patches, key=lambda p: p.delta_e)


@dataclass
class WhiteBalanceResult:
    """화이트밸런스 측정 결과"""
    measured_temp: float
    reference_temp: float
    temp_deviation: float
    tint_deviation: float
    avg_rgb: RgbSample
    avg_lab: Lab


# ===== 영역 =====

@dataclass(frozen=True)
class Region:
    """픽셀 단위 분석 영역 (소수 허용)"""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    @classmethod
    def from_fractions(cls, fx: float, fy: float, fw: float, fh: float,
                       image_width: int, image_height: int) -> 'Region':
        """이미지 크기에 대한 비율 좌표로 영역 생성"""
        return cls(x=fx * image_width, y=fy * image_height,
                   width=fw * image_width, height=fh * image_height)


# ===== MTF =====

@dataclass
class EdgeSpreadFunction:
    """오버샘플링된 ESF (빈 없는 연속 bin)"""
    positions: np.ndarray
    intensities: np.ndarray
    oversampling: int = 4
    n_interpolated: int = 0  # 보간으로 채운 빈 bin 수

    def __len__(self) -> int:
        return len(self.intensities)

    @property
    def bin_width(self) -> float:
        return 1.0 / self.oversampling

    @property
    def contrast(self) -> float:
        if len(self.intensities) == 0:
            return 0.0
        return float(np.max(self.intensities) - np.min(self.intensities))


@dataclass
class LineSpreadFunction:
    """ESF의 도함수, 합이 1이 되도록 정규화"""
    values: np.ndarray
    oversampling: int = 4
    window: str = "hamming"

    def __len__(self) -> int:
        return len(self.values)

    @property
    def area(self) -> float:
        return float(np.sum(self.values))

    @property
    def peak_index(self) -> int:
        return int(np.argmax(np.abs(self.values)))


@dataclass
class MTFCurve:
    """
    MTF 곡선

    frequencies는 오버샘플링된 ESF의 Nyquist로 정규화된 값 [0, 1).
    센서 단위(cycles/pixel)는 f × oversampling / 2 이며,
    센서 Nyquist(0.5 cy/px)는 정규화 주파수 1/oversampling 에 해당.
    """
    frequencies: np.ndarray
    values: np.ndarray
    oversampling: int = 4
    fft_size: int = 1024

    def __len__(self) -> int:
        return len(self.values)

    @property
    def nyquist_frequency(self) -> float:
        """곡선이 표현하는 최대 정규화 주파수"""
        if len(self.frequencies) == 0:
            return 0.0
        return float(self.frequencies[-1])

    @property
    def sensor_nyquist(self) -> float:
        """센서 Nyquist (0.5 cy/px)의 정규화 주파수"""
        return 1.0 / self.oversampling

    def to_cycles_per_pixel(self, frequency: float) -> float:
        return float(frequency) * self.oversampling / 2.0

    def from_cycles_per_pixel(self, cycles: float) -> float:
        return float(cycles) * 2.0 / self.oversampling

    def value_at(self, frequency: float) -> float:
        """정규화 주파수에서의 MTF (선형 보간)"""
        return float(np.interp(frequency, self.frequencies, self.values))

    def points(self) -> List[Tuple[float, float]]:
        return [(float(f), float(v))
                for f, v in zip(self.frequencies, self.values)]


@dataclass
class MTFResult:
    """단일 영역 MTF 분석 결과"""
    position: str
    angle_deg: float
    mtf50: float
    mtf30: float
    mtf10: float
    curve: MTFCurve
    region: Optional[Region] = None
    processing_time: float = 0.0

    @property
    def cycles_per_pixel(self) -> Dict[str, float]:
        """MTF50/30/10 을 cycles/pixel 로 변환"""
        return {
            'mtf50': self.curve.to_cycles_per_pixel(self.mtf50),
            'mtf30': self.curve.to_cycles_per_pixel(self.mtf30),
            'mtf10': self.curve.to_cycles_per_pixel(self.mtf10),
        }


# ===== 노이즈 / 다이나믹 레인지 =====

@dataclass
class NoiseResult:
    """영역 노이즈 통계"""
    luminance_noise: float
    chroma_noise: float
    snr: float


@dataclass
class UniformRegion:
    """노이즈 분석에 적합한 균일 블록"""
    x: int
    y: int
    width: int
    height: int
    avg_luminance: float
    std_dev: float

    def to_region(self) -> Region:
        return Region(self.x, self.y, self.width, self.height)


@dataclass
class NoiseAnalysis:
    """이미지 전체 노이즈 분석 결과"""
    luminance_noise: float
    chroma_noise: float
    snr: float
    uniformity_score: float
    noise_spectrum: List[float] = field(default_factory=list)
    uniform_regions: List[UniformRegion] = field(default_factory=list)

    @property
    def n_uniform_regions(self) -> int:
        return len(self.uniform_regions)


@dataclass
class GrayStep:
    """그레이 웨지 1단"""
    step: int
    ev: float
    brightness: float
    noise: float
    snr: float
    valid: bool


@dataclass
class DynamicRangeResult:
    """다이나믹 레인지 평가 결과 (EV)"""
    steps: List[GrayStep]
    total_range: float
    highlight_headroom: float
    shadow_range: float
    ev_step: float = 0.5

    @property
    def valid_steps(self) -> List[GrayStep]:
        return [s for s in self.steps if s.valid]

    @property
    def n_valid(self) -> int:
        return len(self.valid_steps)


@dataclass
class VignettingResult:
    """비네팅(주변부 광량 저하) 결과"""
    center_brightness: float
    corner_brightness: float
    edge_brightness: float
    corner_falloff: float
    edge_falloff: float
    uniformity_score: float
    heatmap: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))


# ===== 배치 =====

@dataclass
class RegionOutcome:
    """영역 1개의 분석 결과 또는 예상된 실패 (태그된 결과)"""
    region_id: str
    value: Any = None
    error: Optional[RegionAnalysisError] = None
    processing_time: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_kind(self) -> str:
        if self.error is None:
            return ""
        return type(self.error).__name__


@dataclass
class BatchReport:
    """다중 영역 분석 결과 (입력 영역 순서 유지)"""
    outcomes: List[RegionOutcome] = field(default_factory=list)
    total_processing_time: float = 0.0

    @property
    def total_regions(self) -> int:
        return len(self.outcomes)

    @property
    def n_ok(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def n_failed(self) -> int:
        return self.total_regions - self.n_ok

    @property
    def values(self) -> Dict[str, Any]:
        return {o.region_id: o.value for o in self.outcomes if o.ok}

    @property
    def errors(self) -> Dict[str, RegionAnalysisError]:
        return {o.region_id: o.error for o in self.outcomes if not o.ok}

    def get(self, region_id: str) -> Optional[RegionOutcome]:
        for outcome in self.outcomes:
            if outcome.region_id == region_id:
                return outcome
        return None

    @property
    def summary(self) -> str:
        lines = [f"총 {self.total_regions}개 영역 중 {self.n_ok}개 성공"]
        for region_id, err in self.errors.items():
            lines.append(f"  {region_id}: {type(err).__name__} - {err}")
        return "\n".join(lines)
