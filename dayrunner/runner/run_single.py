"""Build and run a single target by name.

Same banner and same build/run helpers as ``run_all``, restricted to one
directory. The exit code is the executable's own, or 1 when the build
failed or the executable is missing.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from dayrunner.core.core_utils import split_command
from dayrunner.runner.run_all import (
    DiscoveryError,
    TargetResult,
    build_all,
    discover,
    load_runner_config,
    run_all,
)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build and run one target")
    parser.add_argument("--target", required=True, help="Target directory name, e.g. day3")
    parser.add_argument("--config", default=None)
    parser.add_argument("--base-dir", default=None)
    parser.add_argument("--build-cmd", default=None)
    parser.add_argument("--executable", default=None)
    parser.add_argument("--timeout", type=float, default=None)
    parser.add_argument("--nobuild", action="store_true", help="Skip the build step")
    return parser


def run_single(args: argparse.Namespace) -> int:
    config = load_runner_config(args.config)
    base_dir = args.base_dir if args.base_dir is not None else config.base_dir
    build_command = split_command(args.build_cmd) if args.build_cmd else config.build_command
    executable = args.executable or config.executable
    timeout = args.timeout if args.timeout is not None else config.timeout_s

    # any name is accepted here, not only those matching the configured prefix
    try:
        matches = [t for t in discover(base_dir, prefix="") if t.name == args.target]
    except DiscoveryError as exc:
        raise SystemExit(f"[run_single] {exc}")
    if not matches:
        raise SystemExit(f"[run_single] target not found: {args.target} (in {base_dir})")

    target = matches[0]
    results = {target.name: TargetResult(name=target.name, path=str(target.path))}

    if not args.nobuild and config.build_enabled:
        build_all([target], build_command, results, timeout)
    run_all([target], executable, results, Path(base_dir).resolve(), timeout)

    result = results[target.name]
    if result.ok:
        return 0
    if result.status == "run_failed" and result.run_return_code:
        # killed by a signal: report it the way a shell does
        if result.run_return_code < 0:
            return 128 - result.run_return_code
        return result.run_return_code
    return 1


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    exit_code = run_single(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
