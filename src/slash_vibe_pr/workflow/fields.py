"""Typed access to submitted view-state values.

Slack reports each input element's state as a loosely-typed object. The relay
only ever reads two kinds of element, so they are modelled as a closed set of
variants that each know how to yield their submitted text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


class FieldValue(Protocol):
    def text(self) -> str | None: ...


@dataclass(frozen=True, slots=True)
class PlainTextValue:
    """A `plain_text_input` element: `{"value": "..."}`."""

    value: str | None

    def text(self) -> str | None:
        return self.value


@dataclass(frozen=True, slots=True)
class SingleSelectValue:
    """A static or external select: `{"selected_option": {"value": "..."}}`."""

    selected: str | None

    def text(self) -> str | None:
        return self.selected


def parse_field_value(raw: object) -> FieldValue | None:
    """Classify a raw element state into one of the known variants."""

    if not isinstance(raw, dict):
        return None

    if "selected_option" in raw:
        option = raw.get("selected_option")
        value = option.get("value") if isinstance(option, dict) else None
        return SingleSelectValue(selected=value if isinstance(value, str) else None)

    if "value" in raw:
        value = raw.get("value")
        return PlainTextValue(value=value if isinstance(value, str) else None)

    return None


def extract_field_text(
    values: dict[str, dict[str, Any] | None], block_id: str, action_id: str
) -> str | None:
    """Return the submitted text for `block_id`/`action_id`, if any."""

    block = values.get(block_id)
    if not isinstance(block, dict):
        return None
    field = parse_field_value(block.get(action_id))
    if field is None:
        return None
    return field.text()
