"""
Interactive questions asked by the wizard.
"""

import sys
from typing import List, Optional, Sequence, Tuple


def ask(message: str, default: str = "") -> str:
    """Ask for free text; an empty answer returns the default."""
    suffix = f" [{default}]" if default else ""
    try:
        value = input(f"{message}{suffix}: ").strip()
    except (EOFError, KeyboardInterrupt):
        print("\n\n❌ Operation cancelled by user")
        sys.exit(0)
    return value if value else default


def ask_int(message: str, default: int, min_val: int = 1, max_val: int = 65535) -> int:
    while True:
        raw = ask(message, str(default))
        try:
            value = int(raw)
            if min_val <= value <= max_val:
                return value
        except ValueError:
            pass
        print(f"   ❌ Please enter a number between {min_val} and {max_val}.")


def confirm(message: str, default: bool = False) -> bool:
    hint = "Y/n" if default else "y/N"
    raw = ask(f"{message} ({hint})", "").lower()
    if not raw:
        return default
    return raw in ("y", "yes")


def _print_options(options: Sequence[Tuple[str, str]]) -> None:
    for idx, (name, desc) in enumerate(options, 1):
        line = f"  [{idx}] {name}"
        if desc:
            line += f" - {desc}"
        print(line)


def choose(message: str, options: Sequence[Tuple[str, str]], default: int = 1) -> str:
    """Pick exactly one option and return its name."""
    print(message)
    _print_options(options)
    while True:
        raw = ask("Choice", str(default))
        try:
            value = int(raw)
            if 1 <= value <= len(options):
                return options[value - 1][0]
        except ValueError:
            pass
        print(f"   ❌ Please enter a number between 1 and {len(options)}.")


def choose_many(message: str, options: Sequence[Tuple[str, str]],
                default: Optional[List[int]] = None) -> List[str]:
    """Pick zero or more options from a comma-separated list of numbers."""
    print(message)
    _print_options(options)
    default_raw = ",".join(str(i) for i in default) if default else ""
    while True:
        raw = ask("Choices (comma separated, empty for none)", default_raw)
        if not raw:
            return []
        try:
            picked = sorted({int(part) for part in raw.replace(" ", "").split(",") if part})
        except ValueError:
            picked = []
        if picked and all(1 <= value <= len(options) for value in picked):
            return [options[value - 1][0] for value in picked]
        print(f"   ❌ Please enter numbers between 1 and {len(options)}.")
