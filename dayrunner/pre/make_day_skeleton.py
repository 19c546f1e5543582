#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
make_day_skeleton.py

Create the next day project by copying the template directory.

- Picks N = highest existing <prefix>N + 1 (or --day N)
- Refuses to overwrite an existing directory
- Leaves build outputs (target/) of the template behind
"""

from __future__ import annotations
import argparse
import shutil
import sys
from pathlib import Path
from typing import Optional, Sequence

from dayrunner.core.core_utils import day_number, log
from dayrunner.runner.run_all import DEFAULT_PREFIX, discover

IGNORED = ("target", ".git")


def next_day_number(base_dir: Path, prefix: str = DEFAULT_PREFIX) -> int:
    numbers = [
        n for n in (day_number(t.name, prefix) for t in discover(str(base_dir), prefix))
        if n is not None
    ]
    return max(numbers, default=0) + 1


def make_skeleton(
    base_dir: Path,
    template: str = "template",
    day: Optional[int] = None,
    prefix: str = DEFAULT_PREFIX,
) -> Path:
    """Copy ``base_dir/template`` to ``base_dir/<prefix><day>`` and return the new path."""
    template_dir = base_dir / template
    if not template_dir.is_dir():
        raise FileNotFoundError(f"template directory not found: {template_dir}")

    if day is None:
        day = next_day_number(base_dir, prefix)
    if day <= 0:
        raise ValueError(f"day must be positive, got {day}")

    dest = base_dir / f"{prefix}{day}"
    if dest.exists():
        raise FileExistsError(f"{dest} already exists")

    shutil.copytree(template_dir, dest, ignore=shutil.ignore_patterns(*IGNORED))
    return dest


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Create the next day project from the template")
    ap.add_argument("--base-dir", type=Path, default=Path("."))
    ap.add_argument("--template", default="template")
    ap.add_argument("--prefix", default=DEFAULT_PREFIX)
    ap.add_argument("--day", type=int, default=None, help="Day number (default: next free)")
    return ap.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    try:
        dest = make_skeleton(args.base_dir, args.template, args.day, args.prefix)
    except (FileNotFoundError, FileExistsError, ValueError) as e:
        print(f"[ERR] {e}", file=sys.stderr)
        sys.exit(1)
    log("make_day_skeleton", "copy", f"{args.template} -> {dest}")
    print(f"[OK] {dest.name} created")


if __name__ == "__main__":
    main()
