from __future__ import annotations

from typing import Iterable, List

MAX_PORT = 65535

# ---------------------------
# Well-known service ports, probed on every scan unless disabled
# ---------------------------
COMMON_PORTS: tuple[int, ...] = (
    20,     # FTP data
    21,     # FTP control
    22,     # SSH
    23,     # Telnet
    25,     # SMTP
    53,     # DNS
    80,     # HTTP
    110,    # POP3
    115,    # SFTP
    119,    # NNTP
    123,    # NTP
    143,    # IMAP
    161,    # SNMP
    194,    # IRC
    443,    # HTTPS
    445,    # SMB
    587,    # SMTP submission
    993,    # IMAPS
    995,    # POP3S
    1433,   # MSSQL
    1521,   # Oracle
    3306,   # MySQL
    3389,   # RDP
    5432,   # PostgreSQL
    5900,   # VNC
    8080,   # HTTP alt
    8443,   # HTTPS alt
    9090,
    9200,   # Elasticsearch
    27017,  # MongoDB
)


def is_valid_port(port: int) -> bool:
    return 0 <= port <= MAX_PORT


def merge_ports(user_ports: Iterable[int], include_defaults: bool = True) -> List[int]:
    """Defaults first, then user ports in the order given.

    Repeats collapse onto their first occurrence; out-of-range values are dropped.
    An empty user list always falls back to the defaults.
    """
    out: List[int] = []
    seen: set[int] = set()
    user_ports = list(user_ports)
    source = list(COMMON_PORTS) if include_defaults or not user_ports else []
    source.extend(user_ports)
    for p in source:
        p = int(p)
        if not is_valid_port(p) or p in seen:
            continue
        seen.add(p)
        out.append(p)
    return out


def _port_span(part: str) -> range:
    """One comma-separated item: "443" or "8000-8010" (either order), clipped to 1..MAX_PORT."""
    lo_s, sep, hi_s = part.partition("-")
    try:
        lo = int(lo_s)
        hi = int(hi_s) if sep else lo
    except ValueError:
        return range(0)
    if lo > hi:
        lo, hi = hi, lo
    return range(max(1, lo), min(MAX_PORT, hi) + 1)


def parse_ports_arg(spec: str) -> List[int]:
    """Ports from a spec like "22,80,8000-8010" or "all", sorted and unique.

    Unparseable items are skipped; values outside 1..MAX_PORT are clipped away.
    """
    spec = (spec or "").strip().lower()
    if spec == "all":
        return list(range(1, MAX_PORT + 1))
    out: set[int] = set()
    for part in spec.split(","):
        part = part.strip()
        if part:
            out.update(_port_span(part))
    return sorted(out)
