"""Command line entry point for baobench."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from .benchmarktests import BenchmarkError, BenchmarkRegistry, default_registry
from .config import HarnessConfig, load_harness_config
from .runner import BenchmarkRunner, SubprocessDriver, configure_tests
from .server import HvacServer

DEFAULT_ADDRESS = "http://127.0.0.1:8200"


def build_parser(registry: BenchmarkRegistry) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="baobench",
        description="Benchmark dynamic credential issuance on a secrets-management server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  baobench validate bench.toml\n"
            "  baobench run bench.toml --targets-file targets.jsonl -- \\\n"
            "      vegeta attack -format=json -targets=targets.jsonl -duration=30s\n"
        ),
    )
    parser.add_argument("--log-level", default=None, help="Override log_level from the config file")
    subcommands = parser.add_subparsers(dest="command", required=True)

    validate = subcommands.add_parser("validate", help="Decode the config without contacting the server")
    validate.add_argument("config", type=Path)

    run = subcommands.add_parser("run", help="Provision tests, run the load driver, clean up")
    run.add_argument("config", type=Path)
    run.add_argument(
        "--address",
        default=os.environ.get("VAULT_ADDR", DEFAULT_ADDRESS),
        help="Server address (default: VAULT_ADDR or %(default)s)",
    )
    run.add_argument("--token", default=os.environ.get("VAULT_TOKEN"), help="Token (default: VAULT_TOKEN)")
    run.add_argument(
        "--namespace",
        default=os.environ.get("VAULT_NAMESPACE"),
        help="Namespace (default: VAULT_NAMESPACE)",
    )
    run.add_argument(
        "--targets-file",
        type=Path,
        default=Path("targets.jsonl"),
        help="Where to write vegeta JSON targets (default: %(default)s)",
    )

    for test_type in registry:
        test_type.add_flags(run)
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _validate(args: argparse.Namespace, config: HarnessConfig, registry: BenchmarkRegistry) -> int:
    for named in configure_tests(registry, config.tests):
        print(f"{named.mount_hint}: {named.test.test_type} ok")
    return 0


def _run(args: argparse.Namespace, config: HarnessConfig, registry: BenchmarkRegistry) -> int:
    if not args.token:
        print("error: no token provided (use --token or VAULT_TOKEN)", file=sys.stderr)
        return 1
    if not args.driver:
        print("error: no load driver command given (append -- <command>)", file=sys.stderr)
        return 1
    server = HvacServer(args.address, args.token, namespace=args.namespace)
    runner = BenchmarkRunner(registry, server, config.options())
    result = runner.run(config.tests, SubprocessDriver(args.driver, args.targets_file))
    for test in result.provisioned:
        info = test.target_info()
        print(f"{test.test_type}: {info.method} {info.path_prefix}")
    if result.cleanup_errors:
        print(f"warning: {len(result.cleanup_errors)} mount(s) were not cleaned up", file=sys.stderr)
    return 0


def main(argv: Sequence[str] | None = None, registry: BenchmarkRegistry | None = None) -> None:
    """Parse arguments and dispatch to a subcommand."""

    if registry is None:
        registry = default_registry()
    argv = list(sys.argv[1:] if argv is None else argv)
    driver: list[str] = []
    if "--" in argv:
        split = argv.index("--")
        argv, driver = argv[:split], argv[split + 1 :]
    args = build_parser(registry).parse_args(argv)
    args.driver = driver
    try:
        config = load_harness_config(args.config)
        configure_logging(args.log_level or config.log_level)
        handler = _validate if args.command == "validate" else _run
        code = handler(args, config, registry)
    except BenchmarkError as exc:
        print(f"error: {exc}", file=sys.stderr)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
