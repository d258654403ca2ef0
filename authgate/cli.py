# authgate/cli.py
from __future__ import annotations
import argparse, asyncio, sys
from rich.console import Console
from rich.table import Table
from authgate.common.config import build_config, load_cfg
from authgate.common.log import setup_logger
from authgate.common.models import LegacyToken
from authgate.common.util import now_ms, human_ts_ms, human_age
from authgate.csrf.issuer import TokenIssuer
from authgate.csrf.validator import TokenValidator, parse_token
from authgate.internal.client import InternalClient
from authgate.internal.comparator import SecretComparator
from authgate.internal.scheduler import CRON_PREFIX, job_loop

console = Console()

def show_check(cfg, token: str) -> bool:
    now = now_ms()
    d = TokenValidator(cfg).validate(token, now)
    parsed = parse_token(token, cfg.accept_legacy_tokens)

    t = Table(title="Token check")
    t.add_column("Field")
    t.add_column("Value")
    t.add_row("decision", "[green]accept[/green]" if d.ok else "[red]reject[/red]")
    t.add_row("reason", d.reason)
    if parsed is not None:
        t.add_row("format", "legacy" if isinstance(parsed, LegacyToken) else "current")
        t.add_row("issued at", human_ts_ms(parsed.issued_at_ms))
        t.add_row("age", human_age(now - parsed.issued_at_ms))
        t.add_row("window", human_age(cfg.freshness_window_ms))
    console.print(t)
    return d.ok

async def call_job(cfg, name: str, logger) -> bool:
    client = InternalClient.from_config(cfg, logger)
    try:
        res = await client.call(CRON_PREFIX + name, {"job": name})
        console.print(f"[green]OK[/green] {res}")
        return True
    except Exception as e:
        console.print(f"[red]error:[/red] {e}")
        return False

def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="authgate")
    ap.add_argument("--config", default=None, help="path to authgate.yaml")
    sub = ap.add_subparsers(dest="cmd", required=True)

    sub.add_parser("issue")
    ck = sub.add_parser("check")
    ck.add_argument("token")
    vb = sub.add_parser("verify-bearer")
    vb.add_argument("header")
    cl = sub.add_parser("call")
    cl.add_argument("job")
    sc = sub.add_parser("schedule")
    sc.add_argument("--tick", type=float, default=1.0)

    args = ap.parse_args(argv)
    try:
        cfg = build_config(load_cfg(args.config))
    except RuntimeError as e:
        console.print(f"[red]config error:[/red] {e}")
        return 2

    if args.cmd == "issue":
        console.print(TokenIssuer(cfg).issue(), soft_wrap=True)
        return 0

    if args.cmd == "check":
        return 0 if show_check(cfg, args.token) else 1

    if args.cmd == "verify-bearer":
        d = SecretComparator(cfg).verify(args.header)
        color = "green" if d.ok else "red"
        console.print(f"[{color}]{'accept' if d.ok else 'reject'}[/{color}] {d.reason}")
        return 0 if d.ok else 1

    logger = setup_logger("authgate-cli", cfg.log_dir)

    if args.cmd == "call":
        return 0 if asyncio.run(call_job(cfg, args.job, logger)) else 1

    if args.cmd == "schedule":
        if not cfg.jobs:
            console.print("[yellow]no jobs configured[/yellow]")
            return 1
        client = InternalClient.from_config(cfg, logger)
        try:
            asyncio.run(job_loop(client, cfg.jobs, logger, tick_sec=args.tick))
        except KeyboardInterrupt:
            pass
        return 0

    return 1

if __name__ == "__main__":
    sys.exit(main())
