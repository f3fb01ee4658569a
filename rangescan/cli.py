from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional

from rangescan.config import ScanConfiguration, load_config, load_scan_file
from rangescan.errors import ConfigurationError
from rangescan.logging_setup import setup_logging, get_logger
from rangescan.orchestrator import Orchestrator
from rangescan.otel import maybe_init_otel
from rangescan.ports import parse_ports_arg
from rangescan.render import LiveRenderer


def build_parser() -> argparse.ArgumentParser:
    cfg = load_config().runtime
    p = argparse.ArgumentParser(prog="rangescan", description="TCP connect scan over an IP address range")
    p.add_argument("ip_range_from", nargs="?", help="First address of the range (IPv4 or IPv6)")
    p.add_argument("ip_range_to", nargs="?", help="Last address of the range, same family as the first")
    p.add_argument("-p", "--ports", type=int, nargs="*", default=[], help="Extra ports, probed after the defaults")
    p.add_argument("--ports-spec", default=None, help='Extra ports as a spec, e.g. "8000-8010,9443"')
    p.add_argument("--no-default-ports", action="store_true", help="Probe only the given ports")
    p.add_argument("-t", "--threads", type=int, default=None, help=f"Worker count (default: {cfg.workers})")
    p.add_argument("-o", "--time-out", type=int, default=None, help=f"Connect timeout in ms (default: {cfg.timeout_ms})")
    p.add_argument("--config", default=None, help="YAML scan definition; command-line values win")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log verbosity level")
    return p


def scan_from_args(args: argparse.Namespace) -> ScanConfiguration:
    cfg = load_config().runtime
    params: Dict[str, Any] = {"workers": cfg.workers, "timeout_ms": cfg.timeout_ms}
    if args.config:
        try:
            params.update(load_scan_file(args.config))
        except OSError as e:
            raise ConfigurationError(f"cannot read {args.config}: {e}") from e

    if args.ip_range_from:
        params["start"] = args.ip_range_from
    if args.ip_range_to:
        params["end"] = args.ip_range_to
    if "start" not in params or "end" not in params:
        raise ConfigurationError("both range endpoints are required")

    extra: List[int] = list(args.ports or [])
    if args.ports_spec:
        extra.extend(parse_ports_arg(args.ports_spec))
    if extra:
        params["ports"] = list(params.get("ports") or []) + extra
    if args.no_default_ports:
        params["include_defaults"] = False
    if args.threads is not None:
        params["workers"] = args.threads
    if args.time_out is not None:
        params["timeout_ms"] = args.time_out
    return ScanConfiguration.build(**params)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config()
    setup_logging(args.log_level, file=sys.stderr)
    maybe_init_otel(cfg.otel, "-cli")
    log = get_logger("cli")

    try:
        scan = scan_from_args(args)
    except ConfigurationError as e:
        log.error("invalid_configuration", error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 2

    renderer = LiveRenderer()
    try:
        summary = asyncio.run(Orchestrator(cfg).run_scan(scan, observers=[renderer]))
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    finally:
        renderer.stop()
    log.info("cli_done", open=summary.count, elapsed_ms=summary.elapsed_ms)
    return 0


if __name__ == "__main__":
    sys.exit(main())
