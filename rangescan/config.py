from __future__ import annotations

import ipaddress
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

import yaml

from rangescan.errors import ConfigurationError, InvalidRange
from rangescan.ports import merge_ports


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def _getint(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except Exception:
        return default


def _getbool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.lower() in ("1", "true", "yes", "y", "on")


@dataclass
class OTelConfig:
    enabled: bool = field(default_factory=lambda: _getbool("OTEL_ENABLED", False))
    endpoint: str = field(default_factory=lambda: _getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317") or "http://localhost:4317")
    service_name: str = field(default_factory=lambda: _getenv("OTEL_SERVICE_NAME", "rangescan") or "rangescan")


@dataclass
class RuntimeConfig:
    workers: int = field(default_factory=lambda: _getint("SCAN_WORKERS", 200))
    timeout_ms: int = field(default_factory=lambda: _getint("SCAN_TIMEOUT_MS", 500))
    # 0 bounds the result intake by the worker count
    intake_size: int = field(default_factory=lambda: _getint("SCAN_INTAKE_SIZE", 0))
    # finished API scans kept for GET /scans/{id}
    api_max_jobs: int = field(default_factory=lambda: _getint("SCAN_API_MAX_JOBS", 100))
    log_level: str = field(default_factory=lambda: _getenv("LOG_LEVEL", "INFO") or "INFO")


@dataclass
class AppConfig:
    otel: OTelConfig = field(default_factory=OTelConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)


def load_config() -> AppConfig:
    return AppConfig()


def parse_duration(s: str) -> float:
    """Seconds from "300ms", "10s", "5m", "1h" or a bare number of seconds."""
    s = s.strip().lower()
    if s.endswith("ms"):
        return float(s[:-2]) / 1000.0
    mult = 1.0
    if s.endswith("s"):
        s = s[:-1]
    elif s.endswith("m"):
        mult = 60.0
        s = s[:-1]
    elif s.endswith("h"):
        mult = 3600.0
        s = s[:-1]
    return float(s) * mult


def _as_int(value: Any, what: str) -> int:
    # bool is an int subclass but never a count or a port
    if isinstance(value, bool):
        raise ConfigurationError(f"{what} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{what} must be an integer, got {value!r}") from e


def load_scan_file(path: str) -> Dict[str, Any]:
    """Read a YAML scan definition into keyword arguments for ScanConfiguration.build."""
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path}: expected a mapping at top level")
    out: Dict[str, Any] = {}
    for key in ("start", "end"):
        if raw.get(key) is not None:
            out[key] = raw[key]
    if raw.get("workers") is not None:
        out["workers"] = _as_int(raw["workers"], f"{path}: workers")
    if raw.get("ports") is not None:
        if not isinstance(raw["ports"], list):
            raise ConfigurationError(f"{path}: ports must be a list, got {raw['ports']!r}")
        out["ports"] = [_as_int(p, f"{path}: port") for p in raw["ports"]]
    if "include_defaults" in raw:
        out["include_defaults"] = bool(raw["include_defaults"])
    if raw.get("timeout") is not None:
        try:
            out["timeout_ms"] = int(parse_duration(str(raw["timeout"])) * 1000)
        except ValueError as e:
            raise ConfigurationError(f"{path}: bad timeout {raw['timeout']!r}") from e
    return out


def parse_address(value: Any) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    try:
        return ipaddress.ip_address(str(value).strip())
    except ValueError as e:
        raise ConfigurationError(f"Not an IP address: {value!r}") from e


@dataclass(frozen=True)
class ScanConfiguration:
    """Everything a scan needs. Built once, then shared read-only by every worker."""

    start: ipaddress.IPv4Address | ipaddress.IPv6Address
    end: ipaddress.IPv4Address | ipaddress.IPv6Address
    ports: Tuple[int, ...]
    workers: int
    timeout_ms: int

    def __post_init__(self):
        if self.start.version != self.end.version:
            raise InvalidRange(self.start, self.end)
        if self.workers < 1:
            raise ConfigurationError(f"worker count must be >= 1, got {self.workers}")
        if self.timeout_ms <= 0:
            raise ConfigurationError(f"timeout must be > 0 ms, got {self.timeout_ms}")

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0

    @classmethod
    def build(
        cls,
        start: Any,
        end: Any,
        ports: Optional[Iterable[int]] = None,
        workers: int = 200,
        timeout_ms: int = 500,
        include_defaults: bool = True,
    ) -> "ScanConfiguration":
        return cls(
            start=parse_address(start),
            end=parse_address(end),
            ports=tuple(merge_ports([_as_int(p, "port") for p in ports or []], include_defaults=include_defaults)),
            workers=_as_int(workers, "worker count"),
            timeout_ms=_as_int(timeout_ms, "timeout"),
        )
