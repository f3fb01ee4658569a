from __future__ import annotations

import ipaddress
from typing import Iterator, List, Tuple

from rangescan.errors import InvalidRange
from rangescan.models import IPAddress

Segments = Tuple[int, int, int, int, int, int, int, int]


def ipv6_segments(addr: ipaddress.IPv6Address) -> Segments:
    packed = addr.packed
    return tuple(int.from_bytes(packed[i:i + 2], "big") for i in range(0, 16, 2))  # type: ignore[return-value]


def segments_to_ipv6(segments: Segments) -> ipaddress.IPv6Address:
    return ipaddress.IPv6Address(b"".join(s.to_bytes(2, "big") for s in segments))


def increment_ipv6_segments(segments: Segments) -> Segments:
    """Add one to an address held as eight big-endian 16-bit segments.

    Index 7 is bumped first and the carry moves toward index 0. The all-ones
    address wraps to all zeros.
    """
    result = list(segments)
    carry = 1
    for i in range(7, -1, -1):
        total = segments[i] + carry
        result[i] = total & 0xFFFF
        carry = total >> 16
    return tuple(result)  # type: ignore[return-value]


def _iter_ipv4(start: ipaddress.IPv4Address, end: ipaddress.IPv4Address) -> Iterator[ipaddress.IPv4Address]:
    # range() stops at end inclusive even for 255.255.255.255
    for value in range(int(start), int(end) + 1):
        yield ipaddress.IPv4Address(value)


def _iter_ipv6(start: ipaddress.IPv6Address, end: ipaddress.IPv6Address) -> Iterator[ipaddress.IPv6Address]:
    current = ipv6_segments(start)
    last = ipv6_segments(end)
    while current <= last:
        yield segments_to_ipv6(current)
        if current == last:
            break
        current = increment_ipv6_segments(current)


def iter_ip_range(start: IPAddress, end: IPAddress) -> Iterator[IPAddress]:
    """Every address from start to end inclusive, unfiltered."""
    if isinstance(start, ipaddress.IPv4Address) and isinstance(end, ipaddress.IPv4Address):
        return _iter_ipv4(start, end)
    if isinstance(start, ipaddress.IPv6Address) and isinstance(end, ipaddress.IPv6Address):
        return _iter_ipv6(start, end)
    raise InvalidRange(start, end)


def is_scannable(addr: IPAddress) -> bool:
    """IPv4 addresses ending in .0 or .255 are treated as network/broadcast."""
    if addr.version == 4:
        last = addr.packed[3]
        return last not in (0, 255)
    return True


def generate_ip_range(start: IPAddress, end: IPAddress) -> List[IPAddress]:
    return [ip for ip in iter_ip_range(start, end) if is_scannable(ip)]
