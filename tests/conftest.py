"""
Pytest configuration and fixtures for rangescan tests
"""

import socket

import pytest

from rangescan.logging_setup import setup_logging


@pytest.fixture(autouse=True)
def quiet_logging():
    setup_logging("WARNING")
    yield


def _listening_socket():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind(("127.0.0.1", 0))
    sock.listen(128)
    return sock


@pytest.fixture
def listener():
    """Port of a local TCP listener; connections complete in its backlog."""
    sock = _listening_socket()
    yield sock.getsockname()[1]
    sock.close()


@pytest.fixture
def second_listener():
    sock = _listening_socket()
    yield sock.getsockname()[1]
    sock.close()


@pytest.fixture
def closed_port():
    """A local port with nothing bound to it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
