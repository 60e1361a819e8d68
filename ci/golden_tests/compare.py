"""Golden test comparison script for CI.

Converts every golden document and compares the bytes with the recorded
expectation:
    - Loads the case from YAML (document path, policies, expected bytes)
    - Converts the document with the recorded policies
    - Compares the encoded bytes exactly
    - Reports the first differing offset for failures

CLI:
    python ci/golden_tests/compare.py               # all cases
    python ci/golden_tests/compare.py --name groups # one case
    python ci/golden_tests/compare.py --update      # rewrite expectations

Expected format (ci/golden_tests/expected/groups.yaml):
    document: ci/golden_tests/svg/groups.svg
    provenance: hand-derived
    policies:
      precision: normal
      color_policy: truncate
      grid_policy: require_exact
    expected:
      - "50 44 43 49 32 00 00 00"
      - "01 00 28 00 1E 00 02 00"
      ...

Document paths are relative to the repository root.  ``expected`` is a
list of hex chunks; whitespace inside and between chunks is ignored.
``provenance`` says where the bytes came from: ``hand-derived`` from the
format rules, or ``recorded`` by ``--update`` from converter output.

Exit codes:
    0: All cases passed
    1: One or more cases failed
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from svg2pdc.color import ColorPolicy
from svg2pdc.converter.svg import convert_file
from svg2pdc.errors import ConversionError
from svg2pdc.geometry import GridPolicy, Precision
from svg2pdc.utils import fs
from svg2pdc.utils.logging_config import pop_context, push_context, setup_logging

logger = logging.getLogger(__name__)

GOLDEN_DIR = Path(__file__).resolve().parent
REPO_ROOT = GOLDEN_DIR.parent.parent
EXPECTED_DIR = GOLDEN_DIR / "expected"

_HEX_CHUNK = 16

HAND_DERIVED = "hand-derived"
RECORDED = "recorded"


@dataclass(frozen=True)
class GoldenCase:
    """One golden document and its expected encoding."""

    name: str
    document: Path
    precision: Precision
    color_policy: ColorPolicy
    grid_policy: GridPolicy
    expected: bytes
    provenance: str = RECORDED


def load_case(path: Path) -> GoldenCase:
    """Load an expectation file.

    Raises
    ------
    ValueError
        If a key is missing or a value is malformed.
    """
    data = fs.load_yaml(path)
    try:
        policies = data["policies"]
        return GoldenCase(
            name=path.stem,
            document=REPO_ROOT / data["document"],
            precision=Precision(policies["precision"]),
            color_policy=ColorPolicy(policies["color_policy"]),
            grid_policy=GridPolicy(policies["grid_policy"]),
            expected=bytes.fromhex("".join(data["expected"])),
            provenance=data.get("provenance", RECORDED),
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed golden case {path}: missing {e}") from e


def load_cases(name: Optional[str] = None) -> list[GoldenCase]:
    """All cases in ``expected/``, or the one called *name*."""
    paths = sorted(EXPECTED_DIR.glob("*.yaml"))
    if name is not None:
        paths = [p for p in paths if p.stem == name]
        if not paths:
            raise FileNotFoundError(f"No golden case named {name!r} in {EXPECTED_DIR}")
    return [load_case(p) for p in paths]


def encode_case(case: GoldenCase) -> bytes:
    """Convert the case's document with its recorded policies."""
    image = convert_file(case.document, case.color_policy, case.grid_policy, case.precision)
    return image.to_bytes()


def first_difference(actual: bytes, expected: bytes) -> Optional[int]:
    """Offset of the first differing byte, or ``None`` when equal."""
    for offset, (a, e) in enumerate(zip(actual, expected)):
        if a != e:
            return offset
    if len(actual) != len(expected):
        return min(len(actual), len(expected))
    return None


def _hex_lines(data: bytes) -> list[str]:
    return [
        data[i:i + _HEX_CHUNK].hex(" ").upper() for i in range(0, len(data), _HEX_CHUNK)
    ]


def check_case(case: GoldenCase) -> bool:
    """Compare one case; log the outcome."""
    push_context(case=case.name)
    try:
        try:
            actual = encode_case(case)
        except ConversionError as e:
            logger.error("Conversion failed: %s", e)
            return False

        offset = first_difference(actual, case.expected)
        if case.provenance != HAND_DERIVED:
            logger.warning("Expectation is %s, not hand-derived", case.provenance)
        if offset is None:
            logger.info("PASS (%d bytes)", len(actual))
            return True
        logger.error(
            "FAIL at byte %d: expected %s, got %s (lengths %d/%d)",
            offset,
            case.expected[offset:offset + 8].hex(" ").upper() or "<end>",
            actual[offset:offset + 8].hex(" ").upper() or "<end>",
            len(case.expected),
            len(actual),
        )
        return False
    finally:
        pop_context(keys=["case"])


def update_case(case: GoldenCase) -> None:
    """Rewrite a case's expectation from the current encoder output."""
    path = EXPECTED_DIR / f"{case.name}.yaml"
    data = fs.load_yaml(path)
    data["provenance"] = RECORDED
    data["expected"] = _hex_lines(encode_case(case))
    fs.atomic_yaml_dump(data, path)
    logger.info("Updated %s", path)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Compare golden PDC encodings")
    parser.add_argument("--name", type=str, help="Run a single case by name")
    parser.add_argument(
        "--update",
        action="store_true",
        help="Rewrite expectations from current output (review the diff!)",
    )
    parser.add_argument("--json-logs", action="store_true", help="JSON log lines")
    args = parser.parse_args(argv)

    setup_logging(json=args.json_logs, context={"app": "golden"})

    try:
        cases = load_cases(args.name)
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        return 1

    if args.update:
        for case in cases:
            update_case(case)
        return 0

    failed = [case.name for case in cases if not check_case(case)]
    if failed:
        logger.error("%d of %d golden case(s) failed: %s", len(failed), len(cases), ", ".join(failed))
        return 1
    logger.info("All %d golden case(s) passed", len(cases))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
