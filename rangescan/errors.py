from __future__ import annotations


class ConfigurationError(ValueError):
    """Scan parameters that cannot be scanned. Raised before any worker starts."""


class InvalidRange(ConfigurationError):
    """Range endpoints belong to different address families."""

    def __init__(self, start, end):
        super().__init__(
            f"Mixed IPv4 and IPv6 addresses are not supported: {start} - {end}"
        )
        self.start = start
        self.end = end


class ChannelFailure(RuntimeError):
    """Result intake closed while a worker still had a result to deliver.

    This is a startup/shutdown ordering bug, never an expected runtime outcome.
    """
