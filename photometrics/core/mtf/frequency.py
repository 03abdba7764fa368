"""
주파수 응답 계산 (ESF → LSF → MTF)

MTF 곡선의 주파수는 오버샘플링된 ESF의 Nyquist로 정규화됨.
센서 cycles/pixel 변환은 MTFCurve.to_cycles_per_pixel 참고.
"""

import numpy as np
from scipy.signal import windows

from ...models.errors import DegenerateEdgeError, NumericDomainError
from ...models.results import EdgeSpreadFunction, LineSpreadFunction, MTFCurve
from ...utils.logger import logger
from .fft import DEFAULT_FFT_SIZE, is_power_of_two, magnitude_spectrum

SUPPORTED_WINDOWS = ('hamming', 'hann', 'none')


def _peak_centered_window(length: int, peak: int, window: str) -> np.ndarray:
    """peak 위치가 중심이 되도록 잘라낸 윈도우 (길이 length)"""
    if window == 'none':
        return np.ones(length, dtype=np.float64)

    half = max(peak, length - 1 - peak)
    if half == 0:
        return np.ones(length, dtype=np.float64)
    full = windows.get_window(window, 2 * half + 1, fftbins=False)
    start = half - peak
    return np.asarray(full[start:start + length], dtype=np.float64)


def compute_lsf(esf: EdgeSpreadFunction,
                window: str = 'hamming') -> LineSpreadFunction:
    """
    ESF 미분으로 LSF 계산

    중앙 차분 후 LSF 피크를 중심으로 윈도우를 적용하고
    합이 1이 되도록 정규화.

    Args:
        esf: 오버샘플링된 ESF
        window: 'hamming' | 'hann' | 'none'

    Raises:
        DegenerateEdgeError: LSF 면적이 0 (에지 없음)
    """
    if window not in SUPPORTED_WINDOWS:
        raise NumericDomainError(f"지원하지 않는 LSF 윈도우: {window}")
    if len(esf) < 2:
        raise DegenerateEdgeError("ESF 길이가 너무 짧음")

    derivative = np.gradient(esf.intensities)
    peak = int(np.argmax(np.abs(derivative)))
    windowed = derivative * _peak_centered_window(len(derivative), peak, window)

    area = float(np.sum(windowed))
    if abs(area) < 1e-12:
        raise DegenerateEdgeError("LSF 면적이 0")

    return LineSpreadFunction(values=windowed / area,
                              oversampling=esf.oversampling,
                              window=window)


def compute_mtf_from_lsf(lsf: LineSpreadFunction,
                         fft_size: int = DEFAULT_FFT_SIZE) -> MTFCurve:
    """
    LSF의 FFT 크기로 MTF 계산

    Args:
        lsf: 정규화된 LSF
        fft_size: 2의 거듭제곱 FFT 크기

    Returns:
        MTFCurve (fft_size/2 개 점, values[0] == 1)
    """
    if not is_power_of_two(fft_size):
        raise NumericDomainError(f"FFT 크기는 2의 거듭제곱이어야 함: {fft_size}")

    values = np.asarray(lsf.values, dtype=np.float64)
    if len(values) > fft_size:
        # 피크 중심으로 잘라냄
        peak = lsf.peak_index
        start = min(max(peak - fft_size // 2, 0), len(values) - fft_size)
        values = values[start:start + fft_size]
        logger.debug(f"LSF 길이 {len(lsf)} → {fft_size} 로 잘라냄")

    magnitude = magnitude_spectrum(values, fft_size)
    dc = float(magnitude[0])
    if dc <= 1e-12:
        raise DegenerateEdgeError("MTF DC 성분이 0")

    half = fft_size // 2
    mtf = np.clip(magnitude[:half] / dc, 0.0, 1.0)
    mtf[0] = 1.0
    frequencies = np.arange(half, dtype=np.float64) / half

    return MTFCurve(frequencies=frequencies,
                    values=mtf,
                    oversampling=lsf.oversampling,
                    fft_size=fft_size)


def find_mtf_value(curve: MTFCurve, threshold: float) -> float:
    """
    MTF가 threshold 이하로 처음 떨어지는 정규화 주파수

    DC부터 스캔하여 처음 threshold 이하가 되는 샘플과 직전 샘플 사이를
    선형 보간. 끝까지 떨어지지 않으면 마지막 샘플 bin의 주파수를 반환
    (정규화 Nyquist 1.0이 아니라 (N/2 - 1) / (N/2), N=1024이면 511/512).

    Raises:
        NumericDomainError: threshold가 [0, 1] 밖
    """
    if not (0.0 <= threshold <= 1.0):
        raise NumericDomainError(f"MTF 임계값은 [0, 1] 범위여야 함: {threshold}")

    freqs = np.asarray(curve.frequencies, dtype=np.float64)
    values = np.asarray(curve.values, dtype=np.float64)
    if len(values) == 0:
        return 0.0
    if values[0] <= threshold:
        return float(freqs[0])

    for i in range(1, len(values)):
        if values[i] <= threshold:
            v0, v1 = values[i - 1], values[i]
            f0, f1 = freqs[i - 1], freqs[i]
            if v0 == v1:
                return float(f1)
            return float(f0 + (v0 - threshold) / (v0 - v1) * (f1 - f0))

    return float(freqs[-1])
