import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dayrunner.core.core_utils import (
    day_number,
    load_yaml,
    parse_timeout,
    split_command,
    version_key,
)


def test_version_key_sorts_like_version_sort():
    names = ["day10", "day9", "day1", "day", "aoc2", "day100"]
    assert sorted(names, key=version_key) == ["aoc2", "day", "day1", "day9", "day10", "day100"]


def test_day_number():
    assert day_number("day12", "day") == 12
    assert day_number("day", "day") is None
    assert day_number("day1b", "day") is None
    assert day_number("template", "day") is None


@pytest.mark.parametrize(
    "raw, expected",
    [(None, None), ("", None), ("none", None), (0, None), (-1, None), ("2.5", 2.5), (10, 10.0)],
)
def test_parse_timeout(raw, expected):
    assert parse_timeout(raw) == expected


def test_split_command():
    assert split_command("cargo build  --release") == ["cargo", "build", "--release"]
    assert split_command(["make", 1]) == ["make", "1"]
    assert split_command(None) == []


def test_load_yaml(tmp_path: Path):
    path = tmp_path / "cfg.yml"
    path.write_text("a: 1\nb: [x, y]\n", encoding="utf-8")
    assert load_yaml(str(path)) == {"a": 1, "b": ["x", "y"]}

    empty = tmp_path / "empty.yml"
    empty.write_text("", encoding="utf-8")
    assert load_yaml(str(empty)) == {}

    with pytest.raises(FileNotFoundError):
        load_yaml(str(tmp_path / "missing.yml"))

    listing = tmp_path / "list.yml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml(str(listing))
