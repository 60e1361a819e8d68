"""Golden PDC encodings.

Every ``ci/golden_tests/expected/*.yaml`` case is converted and compared
byte for byte.  The CI script itself is exercised through its ``main``.

Usage:
    pytest tests/test_golden.py
    python ci/golden_tests/compare.py --update   # regenerate, then review the diff
"""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path
from types import ModuleType

import pytest

GOLDEN_DIR = Path(__file__).parent.parent / "ci" / "golden_tests"


def _load_compare() -> ModuleType:
    spec = importlib.util.spec_from_file_location("golden_compare", GOLDEN_DIR / "compare.py")
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module


compare = _load_compare()

CASE_NAMES = sorted(p.stem for p in (GOLDEN_DIR / "expected").glob("*.yaml"))


# ============================================================================
# CASES
# ============================================================================


def test_corpus_present() -> None:
    assert CASE_NAMES == ["groups", "paths", "precise", "relative", "shapes"]


@pytest.mark.parametrize("name", CASE_NAMES)
def test_golden_case(name: str) -> None:
    (case,) = compare.load_cases(name)
    actual = compare.encode_case(case)
    assert compare.first_difference(actual, case.expected) is None, (
        f"{name}: first difference at byte {compare.first_difference(actual, case.expected)}"
    )


@pytest.mark.parametrize("name", CASE_NAMES)
def test_expectations_hand_derived(name: str) -> None:
    (case,) = compare.load_cases(name)
    assert case.provenance == compare.HAND_DERIVED


@pytest.mark.parametrize("name", CASE_NAMES)
def test_payload_length_field(name: str) -> None:
    (case,) = compare.load_cases(name)
    assert int.from_bytes(case.expected[4:8], "little") == len(case.expected) - 8


# ============================================================================
# SCRIPT
# ============================================================================


class TestFirstDifference:
    def test_equal(self) -> None:
        assert compare.first_difference(b"abc", b"abc") is None

    def test_mismatch(self) -> None:
        assert compare.first_difference(b"abc", b"abd") == 2

    def test_truncated(self) -> None:
        assert compare.first_difference(b"ab", b"abc") == 2


class TestCompareMain:
    def test_single_case_passes(self) -> None:
        assert compare.main(["--name", "shapes"]) == 0

    def test_all_cases_pass(self) -> None:
        assert compare.main([]) == 0

    def test_unknown_case(self) -> None:
        assert compare.main(["--name", "nonexistent"]) == 1

    def test_mismatch_fails(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (case,) = compare.load_cases("shapes")
        expected = tmp_path / "shapes.yaml"
        expected.write_text(
            f"document: {case.document.relative_to(compare.REPO_ROOT).as_posix()}\n"
            "policies:\n"
            "  precision: precise\n"
            "  color_policy: truncate\n"
            "  grid_policy: require_exact\n"
            "expected:\n"
            f'  - "{case.expected.hex(" ")}"\n',
            encoding="utf-8",
        )
        monkeypatch.setattr(compare, "EXPECTED_DIR", tmp_path)
        assert compare.main(["--name", "shapes"]) == 1

    def test_malformed_case(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "broken.yaml").write_text("document: x.svg\n", encoding="utf-8")
        monkeypatch.setattr(compare, "EXPECTED_DIR", tmp_path)
        assert compare.main([]) == 1

    def test_update_marks_recorded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        source = compare.EXPECTED_DIR / "relative.yaml"
        (tmp_path / "relative.yaml").write_bytes(source.read_bytes())
        monkeypatch.setattr(compare, "EXPECTED_DIR", tmp_path)
        assert compare.main(["--name", "relative", "--update"]) == 0
        (case,) = compare.load_cases("relative")
        assert case.provenance == compare.RECORDED
        assert compare.first_difference(compare.encode_case(case), case.expected) is None
