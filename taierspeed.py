#!/usr/bin/env python3
"""
taierspeed CLI -- throughput and latency against speed-test backends.

Usage::

    python taierspeed.py --server-list servers.json              # first reachable server
    python taierspeed.py --server-list servers.json --server 42  # specific server
    python taierspeed.py --server-list servers.json --json       # JSON to stdout
    python taierspeed.py --no-icmp --concurrent 8 --duration 10 ...
    python taierspeed.py --config-set token=abcdef               # persist a default
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from speedcore import __version__
from speedcore.config import DEFAULTS, config_path, load_config, set_config_value
from speedcore.constants import (
    MAX_CONNECTIONS,
    MAX_DURATION,
    MAX_PING_COUNT,
    MAX_UPLOAD_SIZE,
    MIN_CONNECTIONS,
    MIN_DURATION,
    MIN_PING_COUNT,
    MIN_UPLOAD_SIZE,
)
from speedcore.download import DownloadTester
from speedcore.errors import SpeedtestError
from speedcore.isp import ISPRegistry, default_registry, load_servers
from speedcore.latency import icmp_ping_and_jitter, ping_and_jitter
from speedcore.liveness import is_server_up
from speedcore.logging_setup import configure_logging
from speedcore.sampler import ThroughputResult, ThroughputTester, TransferOptions
from speedcore.servers import Server
from speedcore.upload import UploadTester
from ui.dashboard import (
    ProgressDisplay,
    console,
    print_final_results,
    print_header,
    print_latency,
    print_server,
    print_speed_result,
)


# ---------------------------------------------------------------------------
# Parameter validation
# ---------------------------------------------------------------------------

def _validate(
    ping_count: int,
    duration: float,
    concurrent: int,
    upload_size: int,
) -> None:
    """Raise ``ValueError`` if any parameter is out of range."""
    if not MIN_PING_COUNT <= ping_count <= MAX_PING_COUNT:
        raise ValueError(f"Ping count must be between {MIN_PING_COUNT} and {MAX_PING_COUNT}")
    if not MIN_DURATION <= duration <= MAX_DURATION:
        raise ValueError(f"Duration must be between {MIN_DURATION} and {MAX_DURATION} s")
    if not MIN_CONNECTIONS <= concurrent <= MAX_CONNECTIONS:
        raise ValueError(f"Concurrent requests must be between {MIN_CONNECTIONS} and {MAX_CONNECTIONS}")
    if not MIN_UPLOAD_SIZE <= upload_size <= MAX_UPLOAD_SIZE:
        raise ValueError(f"Upload size must be between {MIN_UPLOAD_SIZE} and {MAX_UPLOAD_SIZE} KiB")


def _read_servers(path: str, registry: ISPRegistry) -> List[Server]:
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    if isinstance(data, dict):
        data = data.get("servers", [])
    return load_servers(data, registry)


async def _pick_server(
    servers: List[Server], server_id: Optional[str]
) -> Optional[Server]:
    """The requested server, or the first one passing the liveness check."""
    if server_id:
        servers = [s for s in servers if s.id == server_id]
    for server in servers:
        if await is_server_up(server):
            return server
    return None


async def _run_transfer(
    tester: ThroughputTester, server: Server, label: str, show_ui: bool
) -> ThroughputResult:
    progress = None
    if show_ui:
        progress = ProgressDisplay()
        progress.start(label)
        tester.on_progress = progress.update
    try:
        return await tester.test(server)
    finally:
        if progress is not None:
            progress.stop()


# ---------------------------------------------------------------------------
# Core test runner
# ---------------------------------------------------------------------------

async def run_speedtest(
    servers: List[Server],
    options: TransferOptions,
    *,
    registry: ISPRegistry,
    server_id: Optional[str] = None,
    ping_count: int = DEFAULTS["ping_count"],
    no_icmp: bool = False,
    source: str = "",
    ipv6: bool = False,
    no_download: bool = False,
    no_upload: bool = False,
    json_output: bool = False,
    simple: bool = False,
) -> Optional[dict]:
    """Liveness -> latency -> download -> upload; returns a JSON-serialisable dict."""
    show_ui = not json_output and not simple

    if show_ui:
        print_header(__version__)
        console.print("[dim]Checking server availability...[/dim]")

    server = await _pick_server(servers, server_id)
    if server is None:
        console.print("[red]Error: No reachable server[/red]")
        return None

    isp = registry.by_id(server.isp)
    if show_ui:
        print_server(server, isp.label if isp else "")

    # -- Latency ------------------------------------------------------------
    if no_icmp:
        latency = await ping_and_jitter(server, ping_count)
    else:
        network = "ip6" if ipv6 else "ip4"
        latency = await icmp_ping_and_jitter(server, ping_count, source, network)

    if show_ui:
        print_latency(latency)
    elif simple:
        print(f"Ping: {latency.ping_ms:.2f} ms\tJitter: {latency.jitter_ms:.2f} ms")

    # -- Download / Upload --------------------------------------------------
    dl_result = None
    if not no_download:
        dl_result = await _run_transfer(DownloadTester(options), server, "Downloading", show_ui)
        if show_ui:
            print_speed_result(dl_result, options.use_bytes, options.use_mebi)
        elif simple:
            print(f"Download: {dl_result.speed_mbps:.2f} Mbps")

    ul_result = None
    if not no_upload:
        ul_result = await _run_transfer(UploadTester(options), server, "Uploading", show_ui)
        if show_ui:
            print_speed_result(ul_result, options.use_bytes, options.use_mebi)
        elif simple:
            print(f"Upload: {ul_result.speed_mbps:.2f} Mbps")

    if show_ui:
        print_final_results(server, latency, dl_result, ul_result, options.use_mebi)

    result = {
        "server": server.to_dict(),
        "latency": latency.to_dict(),
        "download": dl_result.to_dict() if dl_result else None,
        "upload": ul_result.to_dict() if ul_result else None,
    }
    if json_output:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    return result


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _build_parser(config: dict) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="taierspeed -- throughput and latency against speed-test backends",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # Output modes
    parser.add_argument("--json", "-j", action="store_true", help="Output results as JSON")
    parser.add_argument("--simple", "-s", action="store_true", help="Simple output mode (no dashboard)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    # Server selection
    parser.add_argument("--server-list", metavar="FILE", help="JSON file with server descriptors")
    parser.add_argument("--server", metavar="ID", help="Use specific server by ID")

    # Test parameters
    parser.add_argument("--ping-count", type=int, default=config["ping_count"], metavar="N", help="Number of ping samples")
    parser.add_argument("--duration", type=float, default=config["duration"], metavar="SECS", help="Download / upload duration in seconds")
    parser.add_argument("--concurrent", type=int, default=config["concurrent"], metavar="N", help="Concurrent HTTP requests")
    parser.add_argument("--upload-size", type=int, default=config["upload_size"], metavar="KiB", help="Upload payload size per request")
    parser.add_argument("--no-pre-allocate", action="store_true", default=config["no_pre_allocate"], help="Stream random upload data instead of pre-allocating it")
    parser.add_argument("--token", default=config["token"], help="API key for GlobalSpeed servers")
    parser.add_argument("--no-download", action="store_true", help="Skip the download test")
    parser.add_argument("--no-upload", action="store_true", help="Skip the upload test")

    # Latency
    parser.add_argument("--no-icmp", action="store_true", default=config["no_icmp"], help="Use HTTP ping only")
    parser.add_argument("--source", default=config["source"], metavar="IP", help="Source address for ICMP probes")
    family = parser.add_mutually_exclusive_group()
    family.add_argument("-4", "--ipv4", dest="ipv6", action="store_false", help="ICMP over IPv4")
    family.add_argument("-6", "--ipv6", dest="ipv6", action="store_true", help="ICMP over IPv6")
    parser.set_defaults(ipv6=config["ipv6"])

    # Units
    parser.add_argument("--bytes", action="store_true", default=config["bytes"], help="Display byte rates instead of bits")
    parser.add_argument("--mebibytes", action="store_true", default=config["mebibytes"], help="Use 1024-based units")

    # Configuration
    parser.add_argument("--config-set", metavar="KEY=VALUE", help=f"Persist a default to {config_path()} and exit")
    return parser


def main() -> None:
    config = load_config()
    args = _build_parser(config).parse_args()

    configure_logging(args.debug)

    if args.config_set:
        key, sep, value = args.config_set.partition("=")
        if not sep:
            console.print("[red]Error: --config-set expects KEY=VALUE[/red]")
            sys.exit(1)
        try:
            path = set_config_value(key.strip(), value.strip())
        except (KeyError, ValueError) as exc:
            console.print(f"[red]Error: {exc}[/red]")
            sys.exit(1)
        console.print(f"[green]Saved[/green] {key.strip()} to {path}")
        return

    try:
        _validate(
            ping_count=args.ping_count,
            duration=args.duration,
            concurrent=args.concurrent,
            upload_size=args.upload_size,
        )
    except ValueError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)

    if not args.server_list:
        console.print("[red]Error: --server-list is required[/red]")
        sys.exit(1)

    registry = default_registry()
    try:
        servers = _read_servers(args.server_list, registry)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Error: cannot read server list: {exc}[/red]")
        sys.exit(1)

    options = TransferOptions(
        silent=args.json or args.simple,
        use_bytes=args.bytes,
        use_mebi=args.mebibytes,
        concurrency=args.concurrent,
        duration=args.duration,
        token=args.token,
        no_prealloc=args.no_pre_allocate,
        upload_size=args.upload_size * 1024,
    )

    try:
        result = asyncio.run(
            run_speedtest(
                servers,
                options,
                registry=registry,
                server_id=args.server,
                ping_count=args.ping_count,
                no_icmp=args.no_icmp,
                source=args.source,
                ipv6=args.ipv6,
                no_download=args.no_download,
                no_upload=args.no_upload,
                json_output=args.json,
                simple=args.simple,
            )
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Test cancelled by user[/yellow]")
        sys.exit(1)
    except SpeedtestError as exc:
        console.print(f"\n[red]Error: {exc}[/red]")
        sys.exit(1)

    if result is None:
        sys.exit(1)


if __name__ == "__main__":
    main()
