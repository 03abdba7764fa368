"""카메라 측광/측색 측정 패키지"""

from .models import (
    MeasurementError,
    RegionAnalysisError,
    InvalidRegionError,
    DegenerateEdgeError,
    InsufficientSamplesError,
    NumericDomainError,
    RgbSample,
    Lab,
    XYZ,
    Region,
    ColorPatch,
    ColorAccuracyResult,
    WhiteBalanceResult,
    EdgeSpreadFunction,
    LineSpreadFunction,
    MTFCurve,
    MTFResult,
    NoiseResult,
    NoiseAnalysis,
    GrayStep,
    DynamicRangeResult,
    VignettingResult,
    RegionOutcome,
    BatchReport,
)
from .config import MeasurementSettings, SettingsManager, DEFAULT_SETTINGS
from .core import (
    PixelBuffer,
    rgb_to_lab,
    lab_to_rgb,
    delta_e_2000,
    delta_e_2000_batch,
    calculate_saturation_bias,
    calculate_hue_bias,
    analyze_color_checker,
    estimate_color_temperature,
    analyze_white_balance,
    detect_slanted_edge_angle,
    extract_esf,
    compute_lsf,
    compute_mtf_from_lsf,
    find_mtf_value,
    analyze_mtf_region,
    signal_to_noise_ratio,
    calculate_noise,
    analyze_noise,
    evaluate_gray_steps,
    analyze_dynamic_range,
    analyze_vignetting,
)
from .batch import BatchProcessor, try_analyze

__version__ = "1.0.0"

__all__ = [
    # Errors
    'MeasurementError',
    'RegionAnalysisError',
    'InvalidRegionError',
    'DegenerateEdgeError',
    'InsufficientSamplesError',
    'NumericDomainError',

    # Models
    'RgbSample',
    'Lab',
    'XYZ',
    'Region',
    'ColorPatch',
    'ColorAccuracyResult',
    'WhiteBalanceResult',
    'EdgeSpreadFunction',
    'LineSpreadFunction',
    'MTFCurve',
    'MTFResult',
    'NoiseResult',
    'NoiseAnalysis',
    'GrayStep',
    'DynamicRangeResult',
    'VignettingResult',
    'RegionOutcome',
    'BatchReport',

    # Config
    'MeasurementSettings',
    'SettingsManager',
    'DEFAULT_SETTINGS',

    # Color
    'PixelBuffer',
    'rgb_to_lab',
    'lab_to_rgb',
    'delta_e_2000',
    'delta_e_2000_batch',
    'calculate_saturation_bias',
    'calculate_hue_bias',
    'analyze_color_checker',
    'estimate_color_temperature',
    'analyze_white_balance',

    # MTF
    'detect_slanted_edge_angle',
    'extract_esf',
    'compute_lsf',
    'compute_mtf_from_lsf',
    'find_mtf_value',
    'analyze_mtf_region',

    # Noise / Dynamic range / Vignetting
    'signal_to_noise_ratio',
    'calculate_noise',
    'analyze_noise',
    'evaluate_gray_steps',
    'analyze_dynamic_range',
    'analyze_vignetting',

    # Batch
    'BatchProcessor',
    'try_analyze',
]
