"""Human readable templates for log events, keyed by ``(domain, action)``.

The catalog ships as ``event_templates.json`` next to this module: an
object of domains, each mapping action names to ``str.format`` templates.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

TEMPLATES_PATH = Path(__file__).with_name("event_templates.json")


def load_event_templates(path: Path = TEMPLATES_PATH) -> dict[tuple[str, str], str]:
    """Flatten the JSON catalog at ``path``.

    Entries that are not strings are skipped. An unreadable catalog yields
    an empty mapping, which makes every event fall back to its name.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    if not isinstance(raw, Mapping):
        return {}
    return {
        (domain, action): template
        for domain, actions in raw.items()
        if isinstance(actions, Mapping)
        for action, template in actions.items()
        if isinstance(template, str)
    }


EVENT_TEMPLATES = load_event_templates()


def template_for(domain: str, action: str) -> str | None:
    return EVENT_TEMPLATES.get((domain, action))


__all__ = ["EVENT_TEMPLATES", "load_event_templates", "template_for"]
