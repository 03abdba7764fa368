"""
픽셀 버퍼 / 영역 검증 / 설정 관리 테스트

검증 항목:
    1. RGBA 바이트열 → PixelBuffer (길이 검사, 읽기 전용)
    2. width <= 0, 이미지 밖 영역은 샘플링 전에 InvalidRegionError
    3. MeasurementSettings 갱신 및 JSON 저장/불러오기

사용법:
    python -m pytest tests/test_buffer_config.py -v
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import json
import logging
import numpy as np
import pytest

from photometrics import (
    PixelBuffer,
    Region,
    InvalidRegionError,
    NumericDomainError,
    MeasurementSettings,
    SettingsManager,
    calculate_noise,
    analyze_mtf_region,
)
from photometrics.core.buffer import to_luma, region_bounds
from photometrics.utils.logger import logger, set_log_level


# =============================================================================
#  1. PixelBuffer
# =============================================================================

def test_from_bytes_rgba():
    raw = bytes([10, 20, 30, 255] * 6)
    buffer = PixelBuffer.from_bytes(raw, width=3, height=2)

    assert buffer.width == 3 and buffer.height == 2
    assert buffer.data.shape == (2, 3, 4)
    assert not buffer.data.flags.writeable
    avg = buffer.average_rgb(buffer.full_region)
    assert avg.as_tuple() == (10.0, 20.0, 30.0)


def test_from_bytes_length_mismatch():
    with pytest.raises(NumericDomainError):
        PixelBuffer.from_bytes(bytes(10), width=2, height=2)
    with pytest.raises(NumericDomainError):
        PixelBuffer.from_bytes(b"", width=0, height=0)


def test_from_array_gray_and_rgb():
    gray = PixelBuffer.from_array(np.full((4, 5), 77, dtype=np.uint8))
    assert gray.data.shape == (4, 5, 4)
    assert np.all(gray.data[..., :3] == 77)
    assert np.all(gray.data[..., 3] == 255)

    rgb = PixelBuffer.from_array(np.zeros((4, 5, 3), dtype=np.float64) + 300.0)
    assert np.all(rgb.data[..., :3] == 255)


def test_to_luma_rejects_bad_shape():
    with pytest.raises(NumericDomainError):
        to_luma(np.zeros((4, 4, 2)))
    with pytest.raises(NumericDomainError):
        to_luma(np.zeros((0, 4)))


def test_fractional_region_bounds():
    assert region_bounds(Region(1.5, 2.2, 3.0, 1.1)) == (1, 2, 5, 4)


# =============================================================================
#  2. 영역 검증
# =============================================================================

@pytest.mark.parametrize("region", [
    Region(0, 0, 0, 10),
    Region(0, 0, 10, -1),
    Region(-1, 0, 5, 5),
    Region(0, 0, 11, 5),
    Region(5, 5, 6, 2),
    Region(float('nan'), 0, 5, 5),
])
def test_invalid_region_rejected(region):
    buffer = PixelBuffer.from_array(np.zeros((10, 10), dtype=np.uint8))
    with pytest.raises(InvalidRegionError):
        buffer.extract_rgb(region)


def test_invalid_region_before_sampling():
    """width <= 0 영역은 어떤 분석에서도 InvalidRegionError"""
    buffer = PixelBuffer.from_array(np.zeros((10, 10), dtype=np.uint8))
    bad = Region(2, 2, 0, 5)
    with pytest.raises(InvalidRegionError):
        calculate_noise(buffer, bad)
    with pytest.raises(InvalidRegionError):
        analyze_mtf_region(buffer, bad)


# =============================================================================
#  3. 설정
# =============================================================================

def test_settings_update_ignores_unknown_keys():
    settings = MeasurementSettings()
    updated = settings.update({'oversampling': 8, 'bogus': 1,
                               'mtf_thresholds': [0.5, 0.2, 0.1]})

    assert updated.oversampling == 8
    assert updated.mtf_thresholds == (0.5, 0.2, 0.1)
    assert not hasattr(updated, 'bogus')
    assert settings.oversampling == 4


def test_settings_manager_roundtrip(tmp_path):
    path = tmp_path / "settings.json"
    manager = SettingsManager(path)
    manager.set('fft_size', 2048)
    manager.set('snr_threshold_db', 3.0)
    assert manager.save()

    reloaded = SettingsManager(path)
    assert reloaded.get('fft_size') == 2048
    assert reloaded.get_dynamic_range_params()['snr_threshold_db'] == 3.0
    assert reloaded.get_mtf_params()['mtf_thresholds'] == (0.5, 0.3, 0.1)


def test_settings_manager_corrupt_file_keeps_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding='utf-8')

    manager = SettingsManager(path)
    assert manager.settings == MeasurementSettings()


def test_settings_file_is_plain_json(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    manager = SettingsManager(path)
    manager.save()

    data = json.loads(path.read_text(encoding='utf-8'))
    assert data['oversampling'] == 4
    assert data['mtf_thresholds'] == [0.5, 0.3, 0.1]


def test_set_log_level():
    original = logger.level
    try:
        set_log_level('DEBUG')
        assert logger.level == logging.DEBUG
        with pytest.raises(ValueError):
            set_log_level('LOUD')
    finally:
        logger.setLevel(original)
