"""측정 파라미터 설정 및 저장/불러오기"""

import json
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Dict, Any, Optional, Tuple, Union

from .utils.logger import logger


@dataclass
class MeasurementSettings:
    """측정 파라미터 (모든 분석 함수가 공유)"""
    # MTF
    oversampling: int = 4
    fft_size: int = 1024
    lsf_window: str = 'hamming'
    min_edge_contrast: float = 10.0
    mtf_thresholds: Tuple[float, ...] = (0.5, 0.3, 0.1)

    # 다이나믹 레인지
    gray_steps: int = 21
    ev_step: float = 0.5
    snr_threshold_db: float = 1.0
    clip_low: float = 5.0
    clip_high: float = 250.0

    # 노이즈
    noise_block_size: int = 32
    noise_max_std: float = 10.0

    # 비네팅
    vignetting_grid: int = 20
    vignetting_sample_fraction: float = 0.05

    # 배치
    n_workers: Optional[int] = None

    def update(self, params: Dict[str, Any]) -> 'MeasurementSettings':
        """알려진 키만 반영한 새 설정 반환"""
        known = {f.name for f in fields(self)}
        merged = asdict(self)
        for key, value in params.items():
            if key not in known:
                logger.warning(f"알 수 없는 설정 키 무시: {key}")
                continue
            merged[key] = value
        if isinstance(merged['mtf_thresholds'], list):
            merged['mtf_thresholds'] = tuple(merged['mtf_thresholds'])
        return MeasurementSettings(**merged)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['mtf_thresholds'] = list(self.mtf_thresholds)
        return data


DEFAULT_SETTINGS = MeasurementSettings()


class SettingsManager:
    """측정 설정 JSON 관리"""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        if config_path is None:
            config_dir = Path.home() / '.photometrics'
            config_path = config_dir / 'settings.json'
        self.config_path = Path(config_path)
        self.settings = MeasurementSettings()
        self.load()

    def load(self) -> MeasurementSettings:
        """설정 파일 로드 (실패 시 기본값 유지)"""
        try:
            if self.config_path.exists():
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    saved = json.load(f)
                self.settings = self.settings.update(saved)
                logger.info(f"설정 로드: {self.config_path}")
        except (OSError, json.JSONDecodeError, TypeError) as e:
            logger.warning(f"설정 로드 실패: {e}")
        return self.settings

    def save(self) -> bool:
        """설정 파일 저장"""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.settings.to_dict(), f, indent=2,
                          ensure_ascii=False)
            logger.info(f"설정 저장: {self.config_path}")
            return True
        except OSError as e:
            logger.warning(f"설정 저장 실패: {e}")
            return False

    def get(self, key: str, default=None):
        return getattr(self.settings, key, default)

    def set(self, key: str, value):
        self.settings = self.settings.update({key: value})

    def get_mtf_params(self) -> Dict[str, Any]:
        """MTF 파라미터만 반환"""
        keys = ['oversampling', 'fft_size', 'lsf_window',
                'min_edge_contrast', 'mtf_thresholds']
        return {k: getattr(self.settings, k) for k in keys}

    def get_dynamic_range_params(self) -> Dict[str, Any]:
        """다이나믹 레인지 파라미터만 반환"""
        keys = ['gray_steps', 'ev_step', 'snr_threshold_db',
                'clip_low', 'clip_high']
        return {k: getattr(self.settings, k) for k in keys}
