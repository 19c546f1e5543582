import os
import sys
from pathlib import Path
from typing import Callable, Optional

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

EXECUTABLE = Path("target") / "release" / "aoc"


def _write_script(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
    os.chmod(path, 0o755)
    return path


@pytest.fixture
def make_day(tmp_path: Path) -> Callable[..., Path]:
    """Create ``tmp_path/<name>`` with a fake built executable printing its name."""

    def _make(name: str, exit_code: int = 0, with_exe: bool = True, body: Optional[str] = None) -> Path:
        day_dir = tmp_path / name
        day_dir.mkdir()
        (day_dir / "Cargo.toml").write_text('[package]\nname = "aoc"\n', encoding="utf-8")
        if with_exe:
            script = body if body is not None else f'echo "{name} output"\nexit {exit_code}'
            _write_script(day_dir / EXECUTABLE, script)
        return day_dir

    return _make


@pytest.fixture
def build_script(tmp_path: Path) -> Path:
    """Fake build command appending the target name to build.log.

    Fails for any directory listed in the FAIL_BUILD file.
    """
    log_path = tmp_path / "build.log"
    fail_path = tmp_path / "FAIL_BUILD"
    return _write_script(
        tmp_path / "build.sh",
        f'name=$(basename "$PWD")\n'
        f'echo "$name" >> "{log_path}"\n'
        f'if [ -f "{fail_path}" ] && grep -qx "$name" "{fail_path}"; then exit 2; fi\n'
        f"exit 0",
    )


@pytest.fixture
def build_log(tmp_path: Path) -> Callable[[], list]:
    """Return a reader for the target names recorded by ``build_script``."""

    def _read() -> list:
        log_path = tmp_path / "build.log"
        if not log_path.exists():
            return []
        return log_path.read_text(encoding="utf-8").split()

    return _read
