from __future__ import annotations

from typing import Iterable, List, Sequence, TypeVar

from rangescan.errors import ConfigurationError
from rangescan.models import IPAddress, Target
from rangescan.ports import is_valid_port

T = TypeVar("T")


def build_targets(addresses: Iterable[IPAddress], ports: Sequence[int]) -> List[Target]:
    """Address-major cross product: every port of the first address, then the next."""
    usable = [p for p in ports if is_valid_port(p)]
    return [Target(address=ip, port=p) for ip in addresses for p in usable]


def chunk_targets(items: Sequence[T], workers: int) -> List[List[T]]:
    """Split items into contiguous chunks whose sizes differ by at most one.

    The first len(items) % n chunks carry the extra item. n is the worker count
    clamped to len(items), so no chunk is empty.
    """
    if workers < 1:
        raise ConfigurationError(f"worker count must be >= 1, got {workers}")
    n = min(workers, len(items))
    if n == 0:
        return []
    base, remainder = divmod(len(items), n)
    chunks: List[List[T]] = []
    start = 0
    for i in range(n):
        end = start + base + (1 if i < remainder else 0)
        chunks.append(list(items[start:end]))
        start = end
    return chunks
