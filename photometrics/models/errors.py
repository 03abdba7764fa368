"""
측정 오류 분류

- RegionAnalysisError 계열: 영역 단위로 발생하는 예상 가능한 실패.
  배치 처리에서는 RegionOutcome 으로 기록되고 나머지 영역은 계속 처리됨.
- NumericDomainError: 호출 측의 전제조건 위반 (빈 버퍼, threshold > 1 등).
"""

from typing import Optional


class MeasurementError(Exception):
    """photometrics 최상위 예외"""


class RegionAnalysisError(MeasurementError):
    """영역 단위 분석 실패 (복구 가능)"""

    def __init__(self, message: str, region_id: Optional[str] = None):
        super().__init__(message)
        self.region_id = region_id

    @property
    def kind(self) -> str:
        return type(self).__name__


class InvalidRegionError(RegionAnalysisError):
    """영역이 이미지 밖에 있거나 width/height <= 0"""


class DegenerateEdgeError(RegionAnalysisError):
    """안정적인 에지 교차점이 없거나 에지가 축 정렬에 가까움"""


class InsufficientSamplesError(RegionAnalysisError):
    """영역이 너무 작아 통계적으로 의미 있는 ESF/노이즈 추정 불가"""


class NumericDomainError(MeasurementError, ValueError):
    """전제조건 위반 (빈 버퍼, threshold > 1, 2의 거듭제곱이 아닌 FFT 크기 등)"""
