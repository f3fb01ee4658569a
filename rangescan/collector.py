from __future__ import annotations

import bisect
import time
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from rangescan.channel import ResultChannel
from rangescan.logging_setup import get_logger
from rangescan.models import ScanResult, ScanSummary

log = get_logger(__name__)


class ResultObserver(Protocol):
    def begin(self, workers: int) -> None: ...

    def update(self, results: Sequence[ScanResult]) -> None: ...

    def finish(self, summary: ScanSummary) -> None: ...


class ResultCollector:
    """Single consumer of the result channel.

    Keeps every confirmed result in (family, address, port) order and hands the
    full sorted list to each observer after every insertion.
    """

    def __init__(self, observers: Iterable[ResultObserver] = ()):
        self._results: List[ScanResult] = []
        self._observers: List[ResultObserver] = list(observers)
        self.summary: Optional[ScanSummary] = None

    def subscribe(self, observer: ResultObserver) -> None:
        self._observers.append(observer)

    @property
    def done(self) -> bool:
        return self.summary is not None

    def begin(self, workers: int) -> None:
        """Announce how many workers actually run, after clamping."""
        for obs in self._observers:
            obs.begin(workers)

    def snapshot(self) -> Tuple[ScanResult, ...]:
        return tuple(self._results)

    def record(self, result: ScanResult) -> None:
        bisect.insort(self._results, result, key=ScanResult.sort_key)
        snap = self.snapshot()
        for obs in self._observers:
            obs.update(snap)

    def complete(self, started_at: float) -> ScanSummary:
        elapsed = time.perf_counter() - started_at
        self.summary = ScanSummary(count=len(self._results), elapsed_s=elapsed, results=self.snapshot())
        for obs in self._observers:
            obs.finish(self.summary)
        return self.summary

    async def consume(self, channel: ResultChannel, started_at: float) -> ScanSummary:
        while True:
            result = await channel.recv()
            if result is None:
                break
            log.info("open_port", ip=str(result.address), port=result.port)
            self.record(result)
        return self.complete(started_at)
