from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Any, Dict, Tuple

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


@dataclass(frozen=True)
class Target:
    address: IPAddress
    port: int

    def __str__(self) -> str:
        if self.address.version == 6:
            return f"[{self.address}]:{self.port}"
        return f"{self.address}:{self.port}"


@dataclass(frozen=True)
class ScanResult:
    """A target that accepted a TCP connection within the timeout."""

    address: IPAddress
    port: int

    @classmethod
    def from_target(cls, target: Target) -> "ScanResult":
        return cls(address=target.address, port=target.port)

    def sort_key(self) -> Tuple[int, int, int]:
        return (self.address.version, int(self.address), self.port)

    def to_doc(self) -> Dict[str, Any]:
        return {"ip": str(self.address), "port": self.port}


@dataclass(frozen=True)
class ScanSummary:
    count: int
    elapsed_s: float
    results: Tuple[ScanResult, ...] = ()

    @property
    def elapsed_ms(self) -> int:
        return int(self.elapsed_s * 1000)

    def to_doc(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "elapsed_s": round(self.elapsed_s, 6),
            "elapsed_ms": self.elapsed_ms,
        }
