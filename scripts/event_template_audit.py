"""Audit tool for event templates.

Compares the ``(domain, action)`` pairs passed to ``log_event`` in the
package sources with the entries of ``ircflow/logs/event_templates.json``.
"""

from __future__ import annotations

import argparse
import ast
import json
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ircflow.logs import event_catalog  # noqa: E402

PACKAGE_ROOT = PROJECT_ROOT / "ircflow"
TEMPLATES_JSON = PACKAGE_ROOT / "logs" / "event_templates.json"
EXTRA_SOURCES = (PROJECT_ROOT / "main.py",)


def iter_python_files() -> Iterable[Path]:
    yield from PACKAGE_ROOT.rglob("*.py")
    for path in EXTRA_SOURCES:
        if path.exists():
            yield path


def _gather_string_literals(expr: ast.AST) -> set[str]:
    """Return the string literals of ``expr``, following ternary branches."""
    out: set[str] = set()
    if isinstance(expr, ast.Constant) and isinstance(expr.value, str):
        out.add(expr.value)
    elif isinstance(expr, ast.IfExp):
        out.update(_gather_string_literals(expr.body))
        out.update(_gather_string_literals(expr.orelse))
    return out


def _extract_from_call(node: ast.Call) -> set[tuple[str, str]]:
    domain_expr: ast.AST | None = node.args[0] if node.args else None
    action_expr: ast.AST | None = node.args[1] if len(node.args) > 1 else None
    for kw in node.keywords or []:
        if kw.arg == "domain":
            domain_expr = kw.value
        elif kw.arg == "action":
            action_expr = kw.value
    if not (
        isinstance(domain_expr, ast.Constant) and isinstance(domain_expr.value, str)
    ):
        return set()
    if action_expr is None:
        return set()
    return {(domain_expr.value, a) for a in _gather_string_literals(action_expr)}


def extract_references(paths: Iterable[Path]) -> set[tuple[str, str]]:
    refs: set[tuple[str, str]] = set()
    for path in paths:
        try:
            tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        except (OSError, SyntaxError, UnicodeDecodeError):
            continue
        for node in ast.walk(tree):
            if (
                isinstance(node, ast.Call)
                and isinstance(node.func, ast.Attribute)
                and node.func.attr == "log_event"
            ):
                refs.update(_extract_from_call(node))
    return refs


def load_templates_from_json() -> set[tuple[str, str]]:
    try:
        with TEMPLATES_JSON.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        return set()
    result: set[tuple[str, str]] = set()
    if isinstance(raw, dict):
        for domain, actions in raw.items():
            if isinstance(actions, dict):
                result.update((domain, action) for action in actions)
    return result


@dataclass(slots=True)
class DiffResult:
    missing: set[tuple[str, str]]
    unused: set[tuple[str, str]]


def diff() -> DiffResult:
    event_catalog.reload_event_templates()
    code_refs = extract_references(iter_python_files())
    json_templates = load_templates_from_json()
    return DiffResult(missing=code_refs - json_templates, unused=json_templates - code_refs)


def parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Audit event templates vs code usages")
    parser.add_argument(
        "--json-output", action="store_true", help="Emit JSON diff result"
    )
    return parser.parse_args(argv)


def emit_human(d: DiffResult) -> None:
    print("Event Template Audit Report")
    print("============================")
    for title, pairs in (("Missing", d.missing), ("Unused", d.unused)):
        if not pairs:
            print(f"No {title.lower()} templates found.\n")
            continue
        print(f"{title} templates ({len(pairs)}):")
        for domain, action in sorted(pairs):
            print(f"  - {domain}:{action}")
        print()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    result = diff()
    if args.json_output:
        print(
            json.dumps(
                {"missing": sorted(result.missing), "unused": sorted(result.unused)},
                indent=2,
            )
        )
    else:
        emit_human(result)
    return 1 if result.missing else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
