"""
배치 처리 모듈

여러 영역을 병렬로 분석하고 영역 ID로 태그된 결과를 모음
"""

import time
import multiprocessing
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, Mapping, Optional

from ..config import MeasurementSettings, DEFAULT_SETTINGS
from ..core.buffer import PixelBuffer
from ..core.mtf.analyzer import analyze_mtf_region, mtf_sample_regions
from ..models.errors import RegionAnalysisError, NumericDomainError
from ..models.results import Region, RegionOutcome, BatchReport
from ..utils.logger import logger

RegionAnalysis = Callable[[PixelBuffer, Region], Any]


def try_analyze(region_id: str, fn: Callable[..., Any],
                *args, **kwargs) -> RegionOutcome:
    """
    단일 분석 호출을 태그된 결과로 변환

    RegionAnalysisError 는 error 로 기록되고,
    NumericDomainError 같은 호출 측 오류는 그대로 전파됨.
    """
    start_time = time.time()
    try:
        value = fn(*args, **kwargs)
    except RegionAnalysisError as e:
        e.region_id = region_id
        logger.warning(f"[{region_id}] 분석 실패: {e.kind} - {e}")
        return RegionOutcome(region_id=region_id, error=e,
                             processing_time=time.time() - start_time)
    return RegionOutcome(region_id=region_id, value=value,
                         processing_time=time.time() - start_time)


class BatchProcessor:
    """
    다중 영역 병렬 분석기

    Usage:
        processor = BatchProcessor()
        report = processor.analyze_mtf_positions(buffer)
        for region_id, result in report.values.items():
            print(region_id, result.mtf50)
    """

    def __init__(self,
                 settings: Optional[MeasurementSettings] = None,
                 n_workers: Optional[int] = None):
        """
        Args:
            settings: 측정 파라미터 (None = 기본값)
            n_workers: 병렬 처리 워커 수 (None = CPU 코어 수 - 1)
        """
        self.settings = settings if settings is not None else DEFAULT_SETTINGS

        if n_workers is None:
            n_workers = self.settings.n_workers
        if n_workers is None:
            self.n_workers = max(1, multiprocessing.cpu_count() - 1)
        else:
            self.n_workers = max(1, int(n_workers))

    def _mtf_analysis(self, region_id: str) -> RegionAnalysis:
        def run(buffer: PixelBuffer, region: Region):
            return analyze_mtf_region(buffer, region, position=region_id,
                                      settings=self.settings)
        return run

    def _run_one(self, region_id: str, buffer: PixelBuffer, region: Region,
                 analysis: RegionAnalysis) -> RegionOutcome:
        """워커 1건 실행 (예기치 않은 예외도 실패 결과로 기록)"""
        start_time = time.time()
        try:
            return try_analyze(region_id, analysis, buffer, region)
        except NumericDomainError:
            raise
        except Exception as e:
            logger.exception(f"[{region_id}] 예기치 않은 오류")
            error = RegionAnalysisError(f"{type(e).__name__}: {e}",
                                        region_id=region_id)
            return RegionOutcome(region_id=region_id, error=error,
                                 processing_time=time.time() - start_time)

    def analyze_regions(self,
                        buffer: PixelBuffer,
                        regions: Mapping[str, Region],
                        analysis: Optional[RegionAnalysis] = None,
                        progress_callback: Optional[Callable[[int, int, str], None]] = None
                        ) -> BatchReport:
        """
        영역별 분석을 스레드 풀로 병렬 실행

        Args:
            buffer: 읽기 전용 픽셀 버퍼 (워커 간 공유)
            regions: {영역 ID: Region}
            analysis: analysis(buffer, region) 호출 가능 객체
                      (None = 슬랜티드 에지 MTF)
            progress_callback: 진행 콜백 (done, total, region_id)

        Returns:
            입력 순서대로 정렬된 BatchReport
        """
        start_time = time.time()
        total = len(regions)
        if total == 0:
            return BatchReport()

        outcomes: Dict[str, RegionOutcome] = {}
        with ThreadPoolExecutor(max_workers=min(self.n_workers, total)) as executor:
            futures = {}
            for region_id, region in regions.items():
                fn = analysis if analysis is not None else self._mtf_analysis(region_id)
                future = executor.submit(self._run_one, region_id, buffer, region, fn)
                futures[future] = region_id

            for done, future in enumerate(as_completed(futures), start=1):
                region_id = futures[future]
                outcomes[region_id] = future.result()
                if progress_callback:
                    progress_callback(done, total, region_id)

        report = BatchReport(
            outcomes=[outcomes[region_id] for region_id in regions],
            total_processing_time=time.time() - start_time,
        )

        logger.info(f"배치 분석 완료: {report.n_ok}/{report.total_regions} 성공, "
                    f"처리시간={report.total_processing_time:.3f}s")
        return report

    def analyze_mtf_positions(self,
                              buffer: PixelBuffer,
                              progress_callback: Optional[Callable[[int, int, str], None]] = None
                              ) -> BatchReport:
        """중앙 + 네 모서리 5점 MTF 분석"""
        regions = mtf_sample_regions(buffer.width, buffer.height)
        return self.analyze_regions(buffer, regions,
                                    progress_callback=progress_callback)
