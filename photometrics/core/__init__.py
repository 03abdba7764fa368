"""측광/측색 핵심 모듈"""

from .buffer import PixelBuffer, to_luma, luma_from_rgb, validate_region
from .color_space import (
    REF_WHITE_D65,
    rgb_to_xyz,
    xyz_to_lab,
    rgb_to_lab,
    sample_to_lab,
    lab_to_xyz,
    xyz_to_rgb,
    lab_to_rgb,
    xyz_to_xy,
)
from .color_difference import (
    COLORCHECKER_REFERENCE,
    delta_e_2000,
    delta_e_2000_batch,
    calculate_saturation_bias,
    calculate_hue_bias,
    circular_mean_deg,
    rate_delta_e,
    analyze_color_checker,
    warmup_numba,
)
from .color_temperature import estimate_color_temperature, analyze_white_balance
from .noise import (
    SNR_SENTINEL_DB,
    mean,
    standard_deviation,
    signal_to_noise_ratio,
    rgb_to_ycbcr,
    calculate_noise,
    high_pass_noise,
    detect_uniform_regions,
    analyze_noise,
    estimate_usable_iso_limit,
)
from .dynamic_range import (
    ev_for_step,
    evaluate_gray_steps,
    sample_gray_steps,
    analyze_dynamic_range,
)
from .vignetting import analyze_vignetting, falloff_to_ev
from .mtf import (
    fft_radix2,
    warmup_fft,
    detect_slanted_edge_angle,
    extract_esf,
    compute_lsf,
    compute_mtf_from_lsf,
    find_mtf_value,
    MTF_SAMPLE_POSITIONS,
    mtf_sample_regions,
    analyze_mtf_region,
)

__all__ = [
    'PixelBuffer',
    'to_luma',
    'luma_from_rgb',
    'validate_region',
    'REF_WHITE_D65',
    'rgb_to_xyz',
    'xyz_to_lab',
    'rgb_to_lab',
    'sample_to_lab',
    'lab_to_xyz',
    'xyz_to_rgb',
    'lab_to_rgb',
    'xyz_to_xy',
    'COLORCHECKER_REFERENCE',
    'delta_e_2000',
    'delta_e_2000_batch',
    'calculate_saturation_bias',
    'calculate_hue_bias',
    'circular_mean_deg',
    'rate_delta_e',
    'analyze_color_checker',
    'warmup_numba',
    'estimate_color_temperature',
    'analyze_white_balance',
    'SNR_SENTINEL_DB',
    'mean',
    'standard_deviation',
    'signal_to_noise_ratio',
    'rgb_to_ycbcr',
    'calculate_noise',
    'high_pass_noise',
    'detect_uniform_regions',
    'analyze_noise',
    'estimate_usable_iso_limit',
    'ev_for_step',
    'evaluate_gray_steps',
    'sample_gray_steps',
    'analyze_dynamic_range',
    'analyze_vignetting',
    'falloff_to_ev',
    'fft_radix2',
    'warmup_fft',
    'detect_slanted_edge_angle',
    'extract_esf',
    'compute_lsf',
    'compute_mtf_from_lsf',
    'find_mtf_value',
    'MTF_SAMPLE_POSITIONS',
    'mtf_sample_regions',
    'analyze_mtf_region',
]
