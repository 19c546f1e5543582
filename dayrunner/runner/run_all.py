from __future__ import annotations

import argparse
import csv
import os
import subprocess
import sys
import time
from pathlib import Path
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from rich.table import Table

from dayrunner.core.core_utils import (
    console,
    load_yaml,
    log,
    parse_timeout,
    split_command,
    version_key,
)


DEFAULT_PREFIX = "day"
DEFAULT_BUILD_COMMAND = ["cargo", "build", "--release"]
DEFAULT_EXECUTABLE = "target/release/aoc"
ON_ERROR_POLICIES = ("continue", "fail-fast")
NOBUILD = "nobuild"
SEPARATOR = "-----"


class DiscoveryError(RuntimeError):
    """Base directory missing or unreadable; nothing can be processed."""


# Data classes

@dataclass(frozen=True)
class Target:
    name: str
    path: Path


@dataclass
class RunnerConfig:
    base_dir: str = "."
    prefix: str = DEFAULT_PREFIX
    build_enabled: bool = True
    build_command: List[str] = field(default_factory=lambda: list(DEFAULT_BUILD_COMMAND))
    executable: str = DEFAULT_EXECUTABLE
    timeout_s: Optional[float] = None
    on_error: str = "continue"  # "continue" | "fail-fast"
    strict_exit: bool = False
    results_tsv: Optional[str] = None
    summary: bool = False
    dry_run: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TargetResult:
    name: str
    path: str
    build_status: str = "skipped"  # ok | failed | timeout | skipped | aborted
    build_return_code: Optional[int] = None
    build_duration_s: float = 0.0
    run_status: str = ""  # ok | failed | missing_executable | timeout | aborted
    run_return_code: Optional[int] = None
    run_duration_s: float = 0.0

    @property
    def status(self) -> str:
        if self.build_status == "failed":
            return "build_failed"
        if self.build_status == "timeout":
            return "timeout"
        if self.build_status == "aborted":
            return "aborted"
        if self.run_status == "ok":
            return "success"
        if self.run_status == "failed":
            return "run_failed"
        if self.run_status in ("missing_executable", "timeout"):
            return self.run_status
        return "aborted"

    @property
    def ok(self) -> bool:
        return self.status == "success"


# Loading configuration

def _config_bool(section: Dict[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def load_runner_config(path: Optional[str] = None) -> RunnerConfig:
    """Load a runner YAML config into a RunnerConfig (defaults when path is None)."""
    if path is None:
        return RunnerConfig()

    raw = load_yaml(path)
    discovery_cfg = raw.get("discovery") or {}
    build_cfg = raw.get("build") or {}
    run_cfg = raw.get("run") or {}
    policy_cfg = raw.get("policy") or {}
    report_cfg = raw.get("report") or {}

    on_error = str(policy_cfg.get("on_error", "continue"))
    if on_error not in ON_ERROR_POLICIES:
        raise ValueError(f"Unsupported on_error policy: {on_error}")

    build_command = split_command(build_cfg.get("command"))

    return RunnerConfig(
        base_dir=str(discovery_cfg.get("base_dir", ".")),
        prefix=str(discovery_cfg.get("prefix", DEFAULT_PREFIX)),
        build_enabled=_config_bool(build_cfg, "enabled", True),
        build_command=build_command or list(DEFAULT_BUILD_COMMAND),
        executable=str(run_cfg.get("executable", DEFAULT_EXECUTABLE)),
        timeout_s=parse_timeout(policy_cfg.get("timeout_s")),
        on_error=on_error,
        strict_exit=_config_bool(policy_cfg, "strict_exit", False),
        results_tsv=report_cfg.get("results_tsv"),
        summary=_config_bool(report_cfg, "summary", False),
    )


# Discovery / ordering

def discover(base_dir: str, prefix: str = DEFAULT_PREFIX) -> List[Target]:
    """List the directories of ``base_dir`` whose name starts with ``prefix``.

    Order is whatever the filesystem returns; callers sort with ``order``.
    """
    base = Path(base_dir)
    try:
        entries = list(os.scandir(base))
    except OSError as exc:
        raise DiscoveryError(f"Cannot read base directory {base}: {exc}") from exc

    targets: List[Target] = []
    for entry in entries:
        if not entry.name.startswith(prefix):
            continue
        if not entry.is_dir():
            continue
        targets.append(Target(name=entry.name, path=base.resolve() / entry.name))
    return targets


def order(targets: Sequence[Target]) -> List[Target]:
    return sorted(targets, key=lambda t: version_key(t.name))


# Subprocess helpers

def _run_command(
    cmd: List[str], cwd: Path, timeout: Optional[float]
) -> Tuple[str, Optional[int], float]:
    """Run ``cmd`` with inherited stdio; returns (status, return_code, duration)."""
    started_at = time.time()
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), timeout=timeout)
    except subprocess.TimeoutExpired:
        return "timeout", None, time.time() - started_at
    except OSError as exc:
        log("runner", "exec", f"cannot launch {cmd[0]}: {exc}")
        return "failed", None, time.time() - started_at
    status = "ok" if proc.returncode == 0 else "failed"
    return status, proc.returncode, time.time() - started_at


def _abort_remaining(
    targets: Sequence[Target], results: Dict[str, TargetResult], phase: str
) -> None:
    for target in targets:
        result = results[target.name]
        if phase == "build":
            result.build_status = "aborted"
        result.run_status = "aborted"


def print_banner(name: str) -> None:
    print()
    print(SEPARATOR)
    print(f"{name}:", flush=True)


# Phases

def build_all(
    targets: Sequence[Target],
    build_command: List[str],
    results: Dict[str, TargetResult],
    timeout: Optional[float] = None,
    on_error: str = "continue",
) -> bool:
    """Build every target in order. Returns False when fail-fast aborted the run."""
    for idx, target in enumerate(targets):
        result = results[target.name]
        status, ret, duration = _run_command(build_command, target.path, timeout)
        result.build_status = status
        result.build_return_code = ret
        result.build_duration_s = duration
        if status == "ok":
            continue

        log("runner", "build", f"{target.name}: {status} (return_code={ret})")
        if on_error == "fail-fast":
            log("runner", "build", "fail-fast: aborting remaining targets")
            _abort_remaining(targets[idx + 1:], results, "build")
            result.run_status = "aborted"
            return False
    return True


def run_all(
    targets: Sequence[Target],
    executable: str,
    results: Dict[str, TargetResult],
    base_dir: Path,
    timeout: Optional[float] = None,
    on_error: str = "continue",
) -> bool:
    """Run each target's executable once, in order, printing a banner first."""
    for idx, target in enumerate(targets):
        result = results[target.name]
        print_banner(target.name)

        exe_path = target.path / executable
        if not exe_path.is_file():
            log("runner", "run", f"{target.name}: executable not found at {exe_path}")
            result.run_status = "missing_executable"
        else:
            status, ret, duration = _run_command([str(exe_path)], base_dir, timeout)
            result.run_status = status
            result.run_return_code = ret
            result.run_duration_s = duration
            if status != "ok":
                log("runner", "run", f"{target.name}: {status} (return_code={ret})")

        if result.run_status != "ok" and on_error == "fail-fast":
            log("runner", "run", "fail-fast: aborting remaining targets")
            _abort_remaining(targets[idx + 1:], results, "run")
            return False
    return True


# Report

RESULT_COLUMNS = [
    "name",
    "path",
    "status",
    "build_status",
    "build_return_code",
    "build_duration_s",
    "run_status",
    "run_return_code",
    "run_duration_s",
]


def write_results_tsv(results: List[TargetResult], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=RESULT_COLUMNS, delimiter="\t")
        writer.writeheader()
        for result in results:
            row = {
                "name": result.name,
                "path": result.path,
                "status": result.status,
                "build_status": result.build_status,
                "build_return_code": "" if result.build_return_code is None else result.build_return_code,
                "build_duration_s": f"{result.build_duration_s:.3f}",
                "run_status": result.run_status,
                "run_return_code": "" if result.run_return_code is None else result.run_return_code,
                "run_duration_s": f"{result.run_duration_s:.3f}",
            }
            writer.writerow(row)


def print_summary(results: List[TargetResult]) -> None:
    table = Table(title="dayrunner summary")
    table.add_column("Target", style="bold", no_wrap=True)
    table.add_column("Status")
    table.add_column("Build")
    table.add_column("Run")
    table.add_column("Time (s)", justify="right")
    for result in results:
        style = "green" if result.ok else "red"
        table.add_row(
            result.name,
            f"[{style}]{result.status}[/{style}]",
            result.build_status,
            result.run_status or "-",
            f"{result.build_duration_s + result.run_duration_s:.2f}",
        )
    console.print()
    console.print(table)


def exit_code_for(results: List[TargetResult], config: RunnerConfig) -> int:
    """0 unless the policy asks failures to surface in the exit code."""
    if not (config.strict_exit or config.on_error == "fail-fast"):
        return 0
    return 0 if all(r.ok for r in results) else 1


# Orchestration entry point

def orchestrate(config: RunnerConfig) -> List[TargetResult]:
    targets = order(discover(config.base_dir, config.prefix))
    base_dir = Path(config.base_dir).resolve()

    if config.dry_run:
        print(f"[DRY-RUN] {len(targets)} targets in {base_dir}")
        for target in targets:
            build = " ".join(config.build_command) if config.build_enabled else "(skipped)"
            print(f"- {target.name}: build={build} run={target.path / config.executable}")
        return []

    results: Dict[str, TargetResult] = {
        t.name: TargetResult(name=t.name, path=str(t.path)) for t in targets
    }

    proceed = True
    if config.build_enabled:
        proceed = build_all(
            targets, config.build_command, results, config.timeout_s, config.on_error
        )
    if proceed:
        run_all(
            targets, config.executable, results, base_dir, config.timeout_s, config.on_error
        )

    ordered_results = [results[t.name] for t in targets]
    if config.results_tsv:
        write_results_tsv(ordered_results, Path(config.results_tsv))
    if config.summary:
        print_summary(ordered_results)
    return ordered_results


# CLI


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build every day* project and run the resulting executables in order"
    )
    parser.add_argument(
        "mode",
        nargs="?",
        default=None,
        help="Pass 'nobuild' to skip the build phase",
    )
    parser.add_argument("--config", default=None, help="Path to a runner YAML config")
    parser.add_argument("--base-dir", default=None, help="Directory holding the targets")
    parser.add_argument("--prefix", default=None, help="Target directory name prefix (default: day)")
    parser.add_argument(
        "--build-cmd",
        default=None,
        help="Build command run inside each target (default: 'cargo build --release')",
    )
    parser.add_argument(
        "--executable",
        default=None,
        help="Executable path relative to each target (default: target/release/aoc)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-command timeout in seconds (default: none)",
    )
    parser.add_argument(
        "--on-error",
        choices=ON_ERROR_POLICIES,
        default=None,
        help="Keep going after a failure, or stop at the first one",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with 1 when any target failed",
    )
    parser.add_argument("--results", default=None, help="Write per-target results to this TSV")
    parser.add_argument("--summary", action="store_true", help="Print a summary table at the end")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List targets and commands, do not execute",
    )
    return parser


def apply_cli_overrides(config: RunnerConfig, args: argparse.Namespace) -> RunnerConfig:
    if args.mode == NOBUILD:
        config.build_enabled = False
    if args.base_dir is not None:
        config.base_dir = args.base_dir
    if args.prefix is not None:
        config.prefix = args.prefix
    if args.build_cmd is not None:
        config.build_command = split_command(args.build_cmd)
    if args.executable is not None:
        config.executable = args.executable
    if args.timeout is not None:
        config.timeout_s = parse_timeout(args.timeout)
    if args.on_error is not None:
        config.on_error = args.on_error
    if args.strict:
        config.strict_exit = True
    if args.results is not None:
        config.results_tsv = args.results
    if args.summary:
        config.summary = True
    if args.dry_run:
        config.dry_run = True
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    config = apply_cli_overrides(load_runner_config(args.config), args)
    if config.build_enabled and not config.build_command:
        raise SystemExit("[config] build command is empty")
    try:
        results = orchestrate(config)
    except DiscoveryError as exc:
        raise SystemExit(f"[runner] {exc}")
    return exit_code_for(results, config)


if __name__ == "__main__":
    sys.exit(main())
