import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dayrunner.runner.run_single import build_arg_parser, main, run_single


def _args(*argv):
    return build_arg_parser().parse_args(list(argv))


def test_run_single_builds_and_runs_one_target(tmp_path: Path, make_day, build_script, build_log, capfd):
    make_day("day1")
    make_day("day2")

    code = run_single(
        _args("--target", "day2", "--base-dir", str(tmp_path), "--build-cmd", f"sh {build_script}")
    )
    out, _ = capfd.readouterr()

    assert code == 0
    assert build_log() == ["day2"]
    assert out == "\n-----\nday2:\nday2 output\n"


def test_run_single_propagates_exit_code(tmp_path: Path, make_day):
    make_day("day4", exit_code=7)

    with pytest.raises(SystemExit) as excinfo:
        main(["--target", "day4", "--base-dir", str(tmp_path), "--nobuild"])
    assert excinfo.value.code == 7


def test_run_single_missing_executable(tmp_path: Path, make_day, build_script, build_log):
    make_day("day5", with_exe=False)

    code = run_single(
        _args("--target", "day5", "--base-dir", str(tmp_path), "--nobuild", "--build-cmd", f"sh {build_script}")
    )

    assert code == 1
    assert build_log() == []


def test_run_single_unknown_target(tmp_path: Path, make_day):
    make_day("day1")

    with pytest.raises(SystemExit) as excinfo:
        run_single(_args("--target", "day9", "--base-dir", str(tmp_path)))
    assert "target not found" in str(excinfo.value.code)


def test_run_single_signal_kill_maps_to_shell_code(tmp_path: Path, make_day):
    make_day("day6", body="kill -9 $$")

    code = run_single(_args("--target", "day6", "--base-dir", str(tmp_path), "--nobuild"))

    assert code == 137
