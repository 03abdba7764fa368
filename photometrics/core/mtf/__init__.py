"""슬랜티드 에지 MTF 측정"""

from .fft import fft_radix2, pad_to_power_of_two, magnitude_spectrum, warmup_fft
from .edge import detect_slanted_edge_angle, extract_esf, orient_edge
from .frequency import compute_lsf, compute_mtf_from_lsf, find_mtf_value
from .analyzer import MTF_SAMPLE_POSITIONS, mtf_sample_regions, analyze_mtf_region

__all__ = [
    'fft_radix2',
    'pad_to_power_of_two',
    'magnitude_spectrum',
    'warmup_fft',
    'detect_slanted_edge_angle',
    'extract_esf',
    'orient_edge',
    'compute_lsf',
    'compute_mtf_from_lsf',
    'find_mtf_value',
    'MTF_SAMPLE_POSITIONS',
    'mtf_sample_regions',
    'analyze_mtf_region',
]
