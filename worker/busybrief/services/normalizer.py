from __future__ import annotations

import json
import re
from typing import Any

from ..errors import invalid_model_response

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")


def extract_json_candidate(raw: str) -> str:
    """Strip code fences and surrounding prose from a model reply.

    Slices from the first "{" to the last "}" inclusive; text without such a
    pair is returned trimmed and otherwise unchanged.
    """
    cleaned = raw.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
    cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end != -1 and end > start:
        return cleaned[start : end + 1].strip()
    return cleaned


def parse_model_output(raw: str) -> Any:
    candidate = extract_json_candidate(raw)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        raise invalid_model_response(f"not valid JSON ({e.msg})") from e
