from __future__ import annotations

import asyncio
import time
import uuid
from typing import Iterable, List, Optional

from opentelemetry import trace, metrics

from rangescan.channel import ResultChannel
from rangescan.collector import ResultCollector, ResultObserver
from rangescan.config import AppConfig, ScanConfiguration, load_config
from rangescan.logging_setup import get_logger
from rangescan.models import ScanSummary, Target
from rangescan.ranges import generate_ip_range
from rangescan.scanner.connect import scan_chunk
from rangescan.targets import build_targets, chunk_targets

log = get_logger(__name__)
tracer = trace.get_tracer(__name__)
meter = metrics.get_meter(__name__)

metric_scans = meter.create_counter("scanner_scans_total")


def plan_scan(scan: ScanConfiguration) -> List[List[Target]]:
    """Range → targets → one chunk per worker. Raises before anything is probed."""
    addresses = generate_ip_range(scan.start, scan.end)
    targets = build_targets(addresses, scan.ports)
    return chunk_targets(targets, scan.workers)


class Orchestrator:
    def __init__(self, cfg: Optional[AppConfig] = None):
        self.cfg = cfg or load_config()

    def _intake_size(self, workers: int) -> int:
        size = self.cfg.runtime.intake_size
        return size if size > 0 else max(1, workers)

    async def run_scan(
        self,
        scan: ScanConfiguration,
        collector: Optional[ResultCollector] = None,
        observers: Iterable[ResultObserver] = (),
        scan_id: Optional[str] = None,
    ) -> ScanSummary:
        scan_id = scan_id or str(uuid.uuid4())
        started_at = time.perf_counter()
        collector = collector or ResultCollector()
        for obs in observers:
            collector.subscribe(obs)

        # planning runs off the event loop
        chunks = await asyncio.to_thread(plan_scan, scan)
        with tracer.start_as_current_span("scan") as span:
            span.set_attribute("scan.id", scan_id)
            span.set_attribute("scan.workers", len(chunks))
            log.info(
                "scan_start",
                scan_id=scan_id,
                start=str(scan.start),
                end=str(scan.end),
                ports=len(scan.ports),
                targets=sum(len(c) for c in chunks),
                workers=len(chunks),
                timeout_ms=scan.timeout_ms,
            )
            metric_scans.add(1)
            collector.begin(len(chunks))

            channel = ResultChannel(maxsize=self._intake_size(len(chunks)))
            # every sender exists before the first worker runs
            senders = [channel.sender() for _ in chunks]
            workers = [
                asyncio.create_task(scan_chunk(chunk, scan.timeout_s, sender, worker_id=i))
                for i, (chunk, sender) in enumerate(zip(chunks, senders))
            ]

            try:
                summary = await collector.consume(channel, started_at)
            except BaseException:
                channel.close()
                for w in workers:
                    w.cancel()
                await asyncio.gather(*workers, return_exceptions=True)
                raise

            channel.close()
            await asyncio.gather(*workers)
            log.info(
                "scan_complete",
                scan_id=scan_id,
                open=summary.count,
                elapsed_ms=summary.elapsed_ms,
            )
            return summary
