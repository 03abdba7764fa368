"""측정 데이터 모델"""

from .errors import (
    MeasurementError,
    RegionAnalysisError,
    InvalidRegionError,
    DegenerateEdgeError,
    InsufficientSamplesError,
    NumericDomainError,
)
from .results import (
    RgbSample,
    XYZ,
    Lab,
    ColorPatch,
    ColorAccuracyResult,
    WhiteBalanceResult,
    Region,
    EdgeSpreadFunction,
    LineSpreadFunction,
    MTFCurve,
    MTFResult,
    NoiseResult,
    UniformRegion,
    NoiseAnalysis,
    GrayStep,
    DynamicRangeResult,
    VignettingResult,
    RegionOutcome,
    BatchReport,
)

__all__ = [
    'MeasurementError',
    'RegionAnalysisError',
    'InvalidRegionError',
    'DegenerateEdgeError',
    'InsufficientSamplesError',
    'NumericDomainError',
    'RgbSample',
    'XYZ',
    'Lab',
    'ColorPatch',
    'ColorAccuracyResult',
    'WhiteBalanceResult',
    'Region',
    'EdgeSpreadFunction',
    'LineSpreadFunction',
    'MTFCurve',
    'MTFResult',
    'NoiseResult',
    'UniformRegion',
    'NoiseAnalysis',
    'GrayStep',
    'DynamicRangeResult',
    'VignettingResult',
    'RegionOutcome',
    'BatchReport',
]
