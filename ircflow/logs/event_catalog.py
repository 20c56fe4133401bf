"""Human readable templates for ``log_event``, keyed by (domain, action).

The templates live in ``event_templates.json`` next to this module as a
``{domain: {action: template}}`` object.
"""

from __future__ import annotations

import json
from pathlib import Path

TEMPLATES_PATH = Path(__file__).parent / "event_templates.json"

EVENT_TEMPLATES: dict[tuple[str, str], str] = {}


def load_event_templates(path: Path = TEMPLATES_PATH) -> dict[tuple[str, str], str]:
    """Read ``path`` into a flat mapping; entries that are not strings are skipped.

    Problems reading the file show up as an ``("app", "load_error")`` entry
    so that logging keeps working with its generic fallback text.
    """
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {("app", "load_error"): f"Event templates not found at {path}"}
    except (OSError, ValueError) as e:
        return {("app", "load_error"): f"Unreadable event templates: {e}"[:200]}
    if not isinstance(document, dict):
        return {("app", "load_error"): "Event templates must be a JSON object"}
    return {
        (domain, action): text
        for domain, actions in document.items()
        if isinstance(actions, dict)
        for action, text in actions.items()
        if isinstance(text, str)
    }


def reload_event_templates() -> None:
    """Replace the shared catalog contents with a fresh read of the JSON file."""
    fresh = load_event_templates()
    EVENT_TEMPLATES.clear()
    EVENT_TEMPLATES.update(fresh)


reload_event_templates()

__all__ = ["EVENT_TEMPLATES", "TEMPLATES_PATH", "load_event_templates", "reload_event_templates"]
