"""Schema and provenance checks for parsed model output.

The model is asked for a fixed JSON shape but nothing guarantees it. This
module checks the shape field by field, trims and caps every list, and
reconciles action details against the source text: a person or date is only
kept when it appears near the action it is attributed to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union

from .prompts import PromptContract

NO_KEY_POINTS = "No key points identified"
PROVENANCE_WINDOW = 200


@dataclass(frozen=True)
class Valid:
    brief: Dict[str, Any]
    ok: Literal[True] = field(default=True, init=False)


@dataclass(frozen=True)
class Invalid:
    reason: str
    ok: Literal[False] = field(default=False, init=False)


ValidationResult = Union[Valid, Invalid]


def clean_list(items: List[Any], max_items: int) -> List[str]:
    """Keep non-empty strings, trimmed, at most `max_items` of them."""
    out: List[str] = []
    for item in items:
        if isinstance(item, str) and item.strip():
            out.append(item.strip())
    return out[:max_items]


def _check_shape(parsed: Any, contract: PromptContract) -> Optional[str]:
    if not isinstance(parsed, dict):
        return "top-level value is not an object"
    for name in contract.field_names:
        if not isinstance(parsed.get(name), list):
            return f"field '{name}' is missing or not an array"
    status = parsed.get(contract.status_field)
    if status is not None and not isinstance(status, str):
        return f"field '{contract.status_field}' is not a string"
    details = parsed.get("action_details")
    if details is not None and not isinstance(details, list):
        return "field 'action_details' is not an array"
    return None


def _normalize_status(value: Any, contract: PromptContract) -> Optional[str]:
    if not isinstance(value, str):
        return None
    status = value.strip().lower()
    if not status:
        return None
    if contract.status_values is not None and status not in contract.status_values:
        return None
    return status


def _occurrences(haystack: str, needle: str):
    idx = haystack.find(needle)
    while idx != -1:
        yield idx
        idx = haystack.find(needle, idx + 1)


def is_near(source_lower: str, term: str, anchor: int, window: int = PROVENANCE_WINDOW) -> bool:
    """True if any occurrence of `term` lies within `window` chars of `anchor`."""
    needle = term.lower()
    return any(abs(idx - anchor) <= window for idx in _occurrences(source_lower, needle))


def reconcile_action_details(
    details: List[Any],
    source: str,
    actions: List[str],
    contract: PromptContract,
    window: int = PROVENANCE_WINDOW,
) -> List[Dict[str, Any]]:
    """Drop people/dates that are not found near their action in `source`.

    `actions` is the already-cleaned action sequence. Contracts that do not
    require listed actions get every detail action found in the source
    appended to it while it is under its cap, whether or not the detail
    itself survives, so every kept detail refers to a listed action.
    """
    source_lower = source.lower()
    listed = set(actions)
    cap = contract.cap_for(contract.actions_field)
    kept: List[Dict[str, Any]] = []

    for detail in details:
        if not isinstance(detail, dict):
            continue
        action = detail.get("action")
        if not isinstance(action, str) or not action.strip():
            continue
        action = action.strip()
        if contract.require_listed_action and action not in listed:
            continue

        anchor = source_lower.find(action.lower())
        if anchor == -1:
            continue
        # A grounded action is listed even when its detail ends up discarded.
        if action not in listed and len(actions) < cap:
            actions.append(action)
            listed.add(action)

        entry: Dict[str, Any] = {"action": action}
        for key in ("people", "dates"):
            raw = detail.get(key)
            if not isinstance(raw, list):
                continue
            tokens = [t for t in clean_list(raw, contract.detail_token_cap) if is_near(source_lower, t, anchor, window)]
            if tokens:
                entry[key] = tokens
        if "people" not in entry and "dates" not in entry:
            continue
        kept.append(entry)

    # Appending stops at the cap; a detail whose action never made it in is dropped.
    return [d for d in kept if d["action"] in listed]


def validate_payload(
    parsed: Any,
    source: str,
    contract: PromptContract,
    window: int = PROVENANCE_WINDOW,
) -> ValidationResult:
    problem = _check_shape(parsed, contract)
    if problem:
        return Invalid(problem)

    brief: Dict[str, Any] = {}
    for name, cap in contract.fields:
        brief[name] = clean_list(parsed[name], cap)

    details = reconcile_action_details(
        parsed.get("action_details") or [],
        source,
        brief[contract.actions_field],
        contract,
        window=window,
    )

    if not brief[contract.summary_field]:
        brief[contract.summary_field] = [NO_KEY_POINTS]

    status = _normalize_status(parsed.get(contract.status_field), contract)
    if status is not None:
        brief[contract.status_field] = status
    if details:
        brief["action_details"] = details
    return Valid(brief)
