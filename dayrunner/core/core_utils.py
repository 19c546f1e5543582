# dayrunner/core/core_utils.py

import os
import re
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.panel import Panel

import yaml

console = Console()
RUNNER_VERSION = "1.0.0"

_NAME_RE = re.compile(r"^(.*?)(\d+)$")

# ---------- Basic utils ----------

def load_yaml(path: str) -> Dict[str, Any]:
    """Load a YAML file as a dict, with a clear error message."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"YAML not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML root must be a mapping: {path}")
    return data


def split_command(raw: Any) -> List[str]:
    """Normalise a command given as a list or a whitespace separated string."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(part) for part in raw]
    return str(raw).split()


def parse_timeout(raw: Any) -> Optional[float]:
    """Convert a timeout value to seconds.

    Accepts None, "", "none", "null", 0 or negatives as "no timeout".
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = raw.strip().lower()
        if raw in {"", "none", "null"}:
            return None
    value = float(raw)
    if value <= 0:
        return None
    return value


# ---------- Version-aware order ----------

def version_key(name: str) -> Tuple[str, int, int]:
    """Sort key splitting ``name`` into alphabetic prefix and numeric suffix.

    "day10" -> ("day", 1, 10). Names without a numeric suffix get 0 in the
    middle slot so they sort before numbered names sharing the prefix.
    """
    match = _NAME_RE.match(name)
    if match is None:
        return (name, 0, 0)
    return (match.group(1), 1, int(match.group(2)))


def day_number(name: str, prefix: str) -> Optional[int]:
    """Return N for "<prefix>N", None otherwise."""
    if not name.startswith(prefix):
        return None
    rest = name[len(prefix):]
    if not rest.isdigit():
        return None
    return int(rest)


# ---------- Minimal logging ----------

def log(script: str, stage: str, msg: str) -> None:
    """Uniform log line."""
    print(f"[{script}:{stage}] {msg}", flush=True)


def debug_print_config(config: Dict[str, Any]) -> None:
    """Print the resolved runner configuration as rich tables."""
    header_text = (
        f"[bold]dayrunner[/bold]\n"
        f"[bold]version=[/bold]{RUNNER_VERSION}\n"
        f"[bold]base_dir=[/bold]{config.get('base_dir')}"
    )
    console.print()
    console.print(
        Panel.fit(
            header_text,
            title="CONFIG",
            subtitle="resolved",
            border_style="cyan",
        )
    )

    t1 = Table(title="Discovery & Build", expand=True)
    t1.add_column("Field", style="bold", no_wrap=True)
    t1.add_column("Value")
    t1.add_row("Prefix", str(config.get("prefix")))
    t1.add_row("Build enabled", str(config.get("build_enabled")))
    t1.add_row("Build command", " ".join(config.get("build_command") or []) or "-")
    t1.add_row("Executable", str(config.get("executable")))
    console.print()
    console.print(t1)

    t2 = Table(title="Policy & Report", expand=True)
    t2.add_column("Field", style="bold", no_wrap=True)
    t2.add_column("Value")
    t2.add_row("On error", str(config.get("on_error")))
    t2.add_row("Strict exit", str(config.get("strict_exit")))
    t2.add_row("Timeout (s)", str(config.get("timeout_s") or "-"))
    t2.add_row("Results TSV", str(config.get("results_tsv") or "-"))
    t2.add_row("Summary", str(config.get("summary")))
    console.print()
    console.print(t2)
    console.print()
