"""
Unit tests for target list building and chunking
"""

import ipaddress

import pytest

from rangescan.errors import ConfigurationError
from rangescan.models import Target
from rangescan.targets import build_targets, chunk_targets

v4 = ipaddress.IPv4Address


def test_targets_are_address_major_in_port_order():
    ips = [v4("10.0.0.1"), v4("10.0.0.2")]
    targets = build_targets(ips, [443, 22, 80])
    assert [(str(t.address), t.port) for t in targets] == [
        ("10.0.0.1", 443),
        ("10.0.0.1", 22),
        ("10.0.0.1", 80),
        ("10.0.0.2", 443),
        ("10.0.0.2", 22),
        ("10.0.0.2", 80),
    ]


def test_out_of_range_ports_are_dropped():
    targets = build_targets([v4("10.0.0.1")], [80, 70000, -1, 65535])
    assert [t.port for t in targets] == [80, 65535]


def test_chunk_sizes_front_load_remainder():
    chunks = chunk_targets(list(range(10)), 3)
    assert [len(c) for c in chunks] == [4, 3, 3]
    assert chunks == [[0, 1, 2, 3], [4, 5, 6], [7, 8, 9]]


@pytest.mark.parametrize("length", [1, 2, 7, 30, 101])
def test_chunks_partition_the_sequence(length):
    items = list(range(length))
    for workers in range(1, length + 1):
        chunks = chunk_targets(items, workers)
        sizes = [len(c) for c in chunks]
        assert len(chunks) == workers
        assert max(sizes) - min(sizes) <= 1
        assert [x for c in chunks for x in c] == items
        assert chunks == chunk_targets(items, workers)


def test_worker_count_is_clamped_to_target_count():
    chunks = chunk_targets(["a", "b", "c"], 8)
    assert chunks == [["a"], ["b"], ["c"]]


def test_no_targets_gives_no_chunks():
    assert chunk_targets([], 4) == []


def test_zero_workers_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        chunk_targets([Target(v4("10.0.0.1"), 80)], 0)
