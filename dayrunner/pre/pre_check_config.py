# dayrunner/pre/pre_check_config.py

import argparse
import os
from typing import List, Optional, Sequence

from dayrunner.core.core_utils import debug_print_config
from dayrunner.runner.run_all import (
    ON_ERROR_POLICIES,
    DiscoveryError,
    RunnerConfig,
    Target,
    discover,
    load_runner_config,
    order,
)

BUILD_MANIFEST = "Cargo.toml"


def validate_policy(config: RunnerConfig) -> None:
    if config.on_error not in ON_ERROR_POLICIES:
        raise SystemExit(
            f"[config] Unknown on_error policy: {config.on_error!r} (expected one of {list(ON_ERROR_POLICIES)})"
        )
    if config.build_enabled and not config.build_command:
        raise SystemExit("[config] build.enabled is true but build.command is empty.")


def validate_targets(config: RunnerConfig) -> List[Target]:
    """Check that the base directory holds targets and warn about incomplete ones."""
    if not os.path.isdir(config.base_dir):
        raise SystemExit(f"[config] base_dir not found: {config.base_dir}")
    try:
        targets = order(discover(config.base_dir, config.prefix))
    except DiscoveryError as e:
        raise SystemExit(f"[config] {e}")
    if not targets:
        raise SystemExit(
            f"[config] No target matching '{config.prefix}*' in {config.base_dir}"
        )

    for target in targets:
        if not (target.path / BUILD_MANIFEST).exists():
            print(f"[config] WARNING: {target.name} has no {BUILD_MANIFEST}")
        if not (target.path / config.executable).is_file():
            hint = "" if config.build_enabled else " (build disabled)"
            print(f"[config] WARNING: {target.name} has no executable at {config.executable}{hint}")
    return targets


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = argparse.ArgumentParser(
        description="Pre-check a runner config and the target tree"
    )
    ap.add_argument("--config", default=None, help="Runner YAML config (optional)")
    ap.add_argument("--base-dir", default=None, help="Override discovery.base_dir")
    ap.add_argument(
        "--verbose", action="store_true", help="Print the resolved config"
    )
    args = ap.parse_args(argv)

    try:
        config = load_runner_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        raise SystemExit(f"[config] {e}")
    if args.base_dir is not None:
        config.base_dir = args.base_dir

    validate_policy(config)
    targets = validate_targets(config)

    if args.verbose:
        debug_print_config(config.as_dict())

    print(f"[OK] {len(targets)} targets found: {', '.join(t.name for t in targets)}")


if __name__ == "__main__":
    main()
