#!/usr/bin/env python3
"""Run the project's checks in sequence and print a summary.

Steps: black, isort, ruff, pylint, pytest. With ``--fix`` the formatters
rewrite files instead of only checking them.
"""

import argparse
from pathlib import Path
import subprocess
import sys

ROOT = Path(__file__).parent
SOURCES = ["app", "core", "infrastructure", "main.py"]


def build_steps(fix: bool) -> list[tuple[str, list[str]]]:
    black = ["python", "-m", "black", "."] + ([] if fix else ["--check"])
    isort = ["python", "-m", "isort", "."] + ([] if fix else ["--check-only"])
    ruff = ["python", "-m", "ruff", "check", "."] + (["--fix"] if fix else [])
    return [
        ("black", black),
        ("isort", isort),
        ("ruff", ruff),
        ("pylint", ["python", "-m", "pylint", *SOURCES]),
        ("pytest", ["python", "-m", "pytest", "-q"]),
    ]


def run_step(name: str, cmd: list[str]) -> tuple[bool, str]:
    print(f"\n{'=' * 60}\n{name}: {' '.join(cmd)}\n{'=' * 60}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False, cwd=ROOT)
    except OSError as e:
        print(f"FAILED to launch: {e}")
        return False, str(e)
    output = (result.stdout + result.stderr).strip()
    print("ok" if result.returncode == 0 else f"FAILED (exit {result.returncode})")
    if output:
        print(output)
    return result.returncode == 0, output


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--fix", action="store_true", help="let formatters rewrite files")
    parser.add_argument("--skip-tests", action="store_true", help="do not run pytest")
    args = parser.parse_args(argv)

    steps = build_steps(args.fix)
    if args.skip_tests:
        steps = [s for s in steps if s[0] != "pytest"]

    failed = [name for name, cmd in steps if not run_step(name, cmd)[0]]

    print(f"\n{'=' * 60}\nSummary")
    for name, _ in steps:
        print(f"  {name:<8} {'FAILED' if name in failed else 'ok'}")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
