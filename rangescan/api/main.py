from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from fastapi import FastAPI, BackgroundTasks, HTTPException
from pydantic import BaseModel

from rangescan.collector import ResultCollector
from rangescan.config import ScanConfiguration, load_config
from rangescan.errors import ConfigurationError
from rangescan.logging_setup import setup_logging, get_logger
from rangescan.orchestrator import Orchestrator
from rangescan.otel import maybe_init_otel
from rangescan.ports import parse_ports_arg


class ScanBody(BaseModel):
    start: str
    end: str
    ports: Optional[List[int]] = None
    ports_spec: Optional[str] = None
    include_defaults: Optional[bool] = True
    workers: Optional[int] = None
    timeout_ms: Optional[int] = None


@dataclass
class ScanJob:
    scan_id: str
    config: ScanConfiguration
    collector: ResultCollector = field(default_factory=ResultCollector)
    error: Optional[str] = None

    @property
    def status(self) -> str:
        if self.error:
            return "failed"
        return "done" if self.collector.done else "running"


cfg = load_config()
setup_logging(cfg.runtime.log_level)
maybe_init_otel(cfg.otel, "-api")

log = get_logger("api")
orch = Orchestrator(cfg)
jobs: Dict[str, ScanJob] = {}

app = FastAPI(title="rangescan API", version="0.1.0")


async def run_job(job: ScanJob) -> None:
    try:
        await orch.run_scan(job.config, collector=job.collector, scan_id=job.scan_id)
    except Exception as e:
        job.error = str(e)
        log.error("scan_failed", scan_id=job.scan_id, error=str(e))


def evict_finished_jobs(limit: int) -> None:
    """Drop the oldest finished scans until there is room for one more."""
    for scan_id in [k for k, j in jobs.items() if j.status != "running"]:
        if len(jobs) < limit:
            break
        del jobs[scan_id]
        log.info("scan_evicted", scan_id=scan_id)


@app.get("/healthz")
async def healthz():
    return {"ok": True}


@app.post("/scans")
async def create_scan(body: ScanBody, tasks: BackgroundTasks):
    ports = list(body.ports or [])
    if body.ports_spec:
        ports.extend(parse_ports_arg(body.ports_spec))
    try:
        scan = ScanConfiguration.build(
            body.start,
            body.end,
            ports=ports,
            workers=body.workers if body.workers is not None else cfg.runtime.workers,
            timeout_ms=body.timeout_ms if body.timeout_ms is not None else cfg.runtime.timeout_ms,
            include_defaults=body.include_defaults is not False,
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    evict_finished_jobs(cfg.runtime.api_max_jobs)
    if len(jobs) >= cfg.runtime.api_max_jobs:
        raise HTTPException(status_code=429, detail="Too many running scans")

    job = ScanJob(scan_id=str(uuid.uuid4()), config=scan)
    jobs[job.scan_id] = job
    # fire-and-forget background task
    tasks.add_task(run_job, job)
    log.info("scan_queued", scan_id=job.scan_id, start=body.start, end=body.end)
    return {"scan_id": job.scan_id}


@app.get("/scans/{scan_id}")
async def get_scan(scan_id: str):
    job = jobs.get(scan_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Unknown scan")
    summary = job.collector.summary
    return {
        "scan_id": job.scan_id,
        "status": job.status,
        "error": job.error,
        "results": [r.to_doc() for r in job.collector.snapshot()],
        "summary": summary.to_doc() if summary else None,
    }
