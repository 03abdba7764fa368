"""
고정 크기 radix-2 FFT (Numba JIT)

MTF 계산 전용. 길이는 2의 거듭제곱이어야 하며
범용 FFT 라이브러리를 대체하려는 목적이 아님.
"""

import math
import numpy as np
from typing import Optional, Tuple
from numba import jit

from ...models.errors import NumericDomainError

DEFAULT_FFT_SIZE = 1024


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


@jit(nopython=True, cache=True)
def _fft_inplace(real: np.ndarray, imag: np.ndarray):
    """반복 Cooley-Tukey (bit-reversal 후 butterfly)"""
    n = real.shape[0]

    # bit-reversal 순열
    j = 0
    for i in range(1, n):
        bit = n >> 1
        while j & bit:
            j ^= bit
            bit >>= 1
        j ^= bit
        if i < j:
            tr = real[i]
            real[i] = real[j]
            real[j] = tr
            ti = imag[i]
            imag[i] = imag[j]
            imag[j] = ti

    length = 2
    while length <= n:
        angle = -2.0 * math.pi / length
        w_re = math.cos(angle)
        w_im = math.sin(angle)
        half = length // 2
        for start in range(0, n, length):
            cur_re = 1.0
            cur_im = 0.0
            for k in range(half):
                a = start + k
                b = a + half
                t_re = real[b] * cur_re - imag[b] * cur_im
                t_im = real[b] * cur_im + imag[b] * cur_re
                real[b] = real[a] - t_re
                imag[b] = imag[a] - t_im
                real[a] += t_re
                imag[a] += t_im
                next_re = cur_re * w_re - cur_im * w_im
                cur_im = cur_re * w_im + cur_im * w_re
                cur_re = next_re
        length <<= 1


def fft_radix2(real: np.ndarray,
               imag: Optional[np.ndarray] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    radix-2 FFT

    Args:
        real: 실수부 (길이 2^k)
        imag: 허수부 (None이면 0)

    Returns:
        (real, imag) 새 배열
    """
    re = np.array(real, dtype=np.float64).ravel()
    n = re.shape[0]
    if not is_power_of_two(n):
        raise NumericDomainError(f"FFT 길이는 2의 거듭제곱이어야 함: {n}")

    if imag is None:
        im = np.zeros(n, dtype=np.float64)
    else:
        im = np.array(imag, dtype=np.float64).ravel()
        if im.shape[0] != n:
            raise NumericDomainError(
                f"실수부/허수부 길이 불일치: {n} != {im.shape[0]}")

    _fft_inplace(re, im)
    return re, im


def pad_to_power_of_two(signal: np.ndarray, size: int) -> np.ndarray:
    """신호를 size 길이로 0-패딩"""
    if not is_power_of_two(size):
        raise NumericDomainError(f"FFT 크기는 2의 거듭제곱이어야 함: {size}")
    signal = np.asarray(signal, dtype=np.float64).ravel()
    if signal.shape[0] > size:
        raise NumericDomainError(
            f"신호 길이({signal.shape[0]})가 FFT 크기({size})보다 큼")
    padded = np.zeros(size, dtype=np.float64)
    padded[:signal.shape[0]] = signal
    return padded


def magnitude_spectrum(signal: np.ndarray,
                       size: int = DEFAULT_FFT_SIZE) -> np.ndarray:
    """0-패딩 후 |FFT| (전체 size 길이)"""
    re, im = fft_radix2(pad_to_power_of_two(signal, size))
    return np.hypot(re, im)


def warmup_fft():
    """Numba JIT 워밍업"""
    _fft_inplace(np.zeros(8, dtype=np.float64), np.zeros(8, dtype=np.float64))
