#!/usr/bin/env python3
"""
Development commands for bilocator, run through uv.

Usage: python scripts.py <command> [pytest args...]
"""

import subprocess
import sys
import tempfile
from collections.abc import Callable
from pathlib import Path

ROOT = Path(__file__).resolve().parent
PACKAGE = "src/bilocator/"


def run_command(cmd: list[str], description: str) -> bool:
    """Run a command from the project root and return True if it succeeded."""
    print(f"\n🔄 {description}: {' '.join(cmd)}")
    try:
        subprocess.run(cmd, check=True, cwd=ROOT)
    except subprocess.CalledProcessError as e:
        print(f"❌ {description} failed with exit code {e.returncode}")
        return False
    except FileNotFoundError:
        print(f"❌ Command not found: {cmd[0]}")
        return False
    print(f"✅ {description} passed")
    return True


def run_all(commands: list[tuple[list[str], str]]) -> int:
    results = [run_command(cmd, desc) for cmd, desc in commands]
    return 0 if all(results) else 1


def run_tests(pytest_args: list[str]) -> int:
    """Run the unit and scenario tests; extra arguments go to pytest (e.g. ``-k promote``)."""
    return run_all([(["uv", "run", "pytest", "-v", *pytest_args], "Tests")])


def run_lint(_: list[str]) -> int:
    code = run_all(
        [
            (["uv", "run", "ruff", "check", "."], "Ruff linting"),
            (["uv", "run", "ruff", "format", "--check", "."], "Ruff formatting"),
        ]
    )
    if code:
        print("\n💡 Auto-fix with: uv run ruff format . && uv run ruff check --fix .")
    return code


def run_typecheck(_: list[str]) -> int:
    return run_all(
        [
            (["uv", "run", "mypy", PACKAGE], "MyPy type checking"),
            (["uv", "run", "pyright", PACKAGE], "Pyright type checking"),
        ]
    )


def run_demos(_: list[str]) -> int:
    """Run every demo/*.py; a demo fails by exiting non-zero."""
    demos = sorted(p for p in (ROOT / "demo").glob("*.py") if not p.name.startswith("_"))
    if not demos:
        print("❌ No demos found in demo/")
        return 1
    return run_all([(["uv", "run", "python", str(p.relative_to(ROOT))], f"Demo {p.name}") for p in demos])


def run_readme_validation(_: list[str]) -> int:
    """Generate pytest cases from the README examples into a temporary directory and run them."""
    with tempfile.TemporaryDirectory(prefix="bilocator-readme-") as tmp:
        test_file = Path(tmp) / "test_readme.py"
        return run_all(
            [
                (["uv", "run", "phmdoctest", "README.md", "--outfile", str(test_file)], "Generating README tests"),
                (["uv", "run", "pytest", str(test_file), "-v", "-p", "no:cacheprovider"], "README examples"),
            ]
        )


COMMANDS: dict[str, Callable[[list[str]], int]] = {
    "test": run_tests,
    "lint": run_lint,
    "typecheck": run_typecheck,
    "demos": run_demos,
    "readme": run_readme_validation,
}


def check_all(_: list[str]) -> int:
    """Run every command and print a summary."""
    results = {name: func([]) == 0 for name, func in COMMANDS.items()}

    print(f"\n{'=' * 20} SUMMARY {'=' * 20}")
    for name, passed in results.items():
        print(f"{name:<10} {'✅ PASS' if passed else '❌ FAIL'}")
    return 0 if all(results.values()) else 1


COMMANDS["check"] = check_all


if __name__ == "__main__":
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print(__doc__.strip())
        print(f"Commands: {', '.join(COMMANDS)}")
        sys.exit(1)
    sys.exit(COMMANDS[sys.argv[1]](sys.argv[2:]))
