from __future__ import annotations

import asyncio
from typing import Sequence

from opentelemetry import trace, metrics

from rangescan.channel import ResultSender
from rangescan.logging_setup import get_logger
from rangescan.models import ScanResult, Target

log = get_logger(__name__)
tracer = trace.get_tracer(__name__)
meter = metrics.get_meter(__name__)

metric_probes = meter.create_counter("scanner_probes_total")
metric_open = meter.create_counter("scanner_open_total")


async def probe(target: Target, timeout_s: float) -> bool:
    """True when the target accepts a TCP connection within timeout_s.

    Nothing is sent or read; the connection is closed right away. Timeouts,
    refusals and any other transport error mean closed.
    """
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(str(target.address), target.port), timeout=timeout_s
        )
    except (asyncio.TimeoutError, OSError):
        return False
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True


async def scan_chunk(chunk: Sequence[Target], timeout_s: float, sender: ResultSender, worker_id: int = 0) -> int:
    """Probe one chunk in order, forwarding each open target as soon as it is found."""
    found = 0
    try:
        with tracer.start_as_current_span("scan_chunk") as span:
            span.set_attribute("worker.id", worker_id)
            span.set_attribute("worker.targets", len(chunk))
            for target in chunk:
                is_open = await probe(target, timeout_s)
                metric_probes.add(1)
                if not is_open:
                    continue
                metric_open.add(1)
                found += 1
                await sender.send(ScanResult.from_target(target))
    finally:
        await sender.close()
    log.debug("worker_done", worker=worker_id, targets=len(chunk), open=found)
    return found
