"""vaultcheck CLI — run the vault invariant catalog from the command line.

Usage:
    vaultcheck catalog                  List the invariant catalog
    vaultcheck run [options]            Run a random campaign against a bundled vault
    vaultcheck config                   Show current configuration
    vaultcheck --version                Print version

Examples:
    vaultcheck run --vault reference --sequences 200 --seed 7
    vaultcheck run --vault erc4626 --decimals 6 --offset 3 --format json
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from functools import partial

from vaultcheck import __version__
from vaultcheck.core.config import get_settings
from vaultcheck.core.logging import setup_logging
from vaultcheck.fuzzer.campaign import CampaignConfig, CampaignResult, VaultCampaign
from vaultcheck.properties.catalog import CATALOG
from vaultcheck.properties.context import build_harness


# ── Coloured output helpers ──────────────────────────────────────────────────

_RESET = "\033[0m"
_BOLD = "\033[1m"
_RED = "\033[91m"
_YELLOW = "\033[93m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"


def _c(text: str, code: str) -> str:
    return f"{code}{text}{_RESET}"


BANNER = f"{_BOLD}{_CYAN}vaultcheck{_RESET} {_DIM}— share vault invariant harness v{__version__}{_RESET}"


# ── CLI argument parser ─────────────────────────────────────────────────────


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be zero or more, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vaultcheck",
        description="vaultcheck — stateful invariant harness for share vaults",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument("--no-banner", action="store_true", help="Suppress the startup banner")
    parser.add_argument("--quiet", "-q", action="store_true", help="Minimal output")

    sub = parser.add_subparsers(dest="command")

    # ── catalog ──────────────────────────────────────────────────────────────
    sub.add_parser("catalog", help="List the invariant catalog")

    # ── run ──────────────────────────────────────────────────────────────────
    run_p = sub.add_parser("run", help="Run a random campaign against a bundled vault")
    run_p.add_argument(
        "--vault",
        choices=["erc4626", "reference"],
        help="Vault variant under test (default: from settings)",
    )
    run_p.add_argument("--sequences", "-n", type=_non_negative_int, help="Number of sequences")
    run_p.add_argument("--length", "-l", type=_positive_int, help="Maximum calls per sequence")
    run_p.add_argument("--seed", type=int, help="Campaign RNG seed")
    run_p.add_argument("--actors", type=_positive_int, help="Number of actors")
    run_p.add_argument("--decimals", type=_non_negative_int, help="Underlying asset decimals")
    run_p.add_argument("--offset", type=_non_negative_int, help="Virtual share decimals offset (erc4626)")
    run_p.add_argument("--check-interval", type=_positive_int, help="Run the catalog every N calls")
    run_p.add_argument("--no-shrink", action="store_true", help="Skip minimization of violations")
    run_p.add_argument(
        "--format",
        "-f",
        default="table",
        choices=["table", "json"],
        help="Output format (default: table)",
    )

    # ── config ───────────────────────────────────────────────────────────────
    sub.add_parser("config", help="Show current configuration")

    return parser


# ── Catalog command ──────────────────────────────────────────────────────────


def _run_catalog() -> int:
    print(f"\n{_BOLD}Invariant catalog ({len(CATALOG)} checks){_RESET}\n")
    for spec in CATALOG:
        kind = _c("oracle", _YELLOW) if spec.is_oracle else _c("view", _DIM)
        print(f"  {spec.id}  {kind:<20s} {spec.statement}")
        if spec.mutates:
            print(f"      {_DIM}mutates: {spec.mutates}{_RESET}")
    print()
    return 0


# ── Run command ──────────────────────────────────────────────────────────────


def _print_table(result: CampaignResult, quiet: bool = False) -> None:
    if not quiet:
        print(f"\n{_BOLD}Check coverage{_RESET}")
        print(f"  {'id':<4s} {'passed':>8s} {'skipped':>8s} {'failed':>8s}")
        for check_id, cov in sorted(result.coverage.items()):
            failed = _c(f"{cov.failed:>8d}", _RED) if cov.failed else f"{cov.failed:>8d}"
            print(f"  {check_id:<4s} {cov.passed:>8d} {cov.total_skipped:>8d} {failed}")

    print(
        f"\n{result.sequences_executed} sequences, {result.total_transitions} calls, "
        f"{result.reverts} reverts in {result.duration_seconds:.1f}s"
    )

    if result.passed:
        print(_c("No invariant violations.", _GREEN))
        return

    reports = result.minimized or result.violations
    print(_c(f"{len(result.violations)} violation(s):", _RED))
    for report in reports:
        print(f"\n  {_BOLD}{report.tag}{_RESET}")
        values = ", ".join(f"{k}={v}" for k, v in report.values.items())
        if values:
            print(f"    {_DIM}{values}{_RESET}")
        for line in report.transitions:
            print(f"    {line}")


def _run_campaign(args: argparse.Namespace) -> int:
    s = get_settings()
    overrides = {
        "sequences": args.sequences,
        "sequence_length": args.length,
        "seed": args.seed,
        "check_interval": args.check_interval,
    }
    if args.no_shrink:
        overrides["enable_minimization"] = False
    config = replace(
        CampaignConfig.from_settings(s),
        **{k: v for k, v in overrides.items() if v is not None},
    )

    factory = partial(
        build_harness,
        args.vault,
        actor_count=args.actors,
        asset_decimals=args.decimals,
        decimals_offset=args.offset,
        settings=s,
    )
    result = VaultCampaign(factory, config).run_campaign()

    if args.format == "json":
        print(json.dumps(result.to_dict(), indent=2, default=str))
    else:
        _print_table(result, quiet=args.quiet)

    return 0 if result.passed else 1


# ── Config command ───────────────────────────────────────────────────────────


def _run_config() -> int:
    """Print current settings."""
    s = get_settings()
    print(f"\n{_BOLD}vaultcheck configuration{_RESET}\n")
    for field_name in sorted(type(s).model_fields.keys()):
        print(f"  {_DIM}{field_name}:{_RESET}  {getattr(s, field_name, '')}")
    print()
    return 0


# ── Entrypoint ───────────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"vaultcheck {__version__}")
        return 0

    if not args.no_banner and not args.quiet:
        print(BANNER, file=sys.stderr)

    s = get_settings()
    setup_logging(s.app_env, "WARNING" if args.quiet else s.log_level)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "catalog":
        return _run_catalog()

    if args.command == "config":
        return _run_config()

    if args.command == "run":
        return _run_campaign(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
