from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from ..errors import AppError
from ..models.brief import MAX_INPUT_CHARS, MIN_INPUT_CHARS, ExplainRequest
from ..state import State, get_state

router = APIRouter(tags=["explain"])


def validate_input(value: Any) -> str:
    """Return the trimmed input text or raise a 400 AppError."""
    if value is None:
        raise AppError("Missing required field: input", 400, "MISSING_INPUT")
    if not isinstance(value, str):
        raise AppError("Input must be a string", 400, "INVALID_INPUT_TYPE")
    text = value.strip()
    if not text:
        raise AppError("Missing required field: input", 400, "MISSING_INPUT")
    if len(text) < MIN_INPUT_CHARS:
        raise AppError(f"Input must be at least {MIN_INPUT_CHARS} characters long", 400, "INPUT_TOO_SHORT")
    if len(text) > MAX_INPUT_CHARS:
        raise AppError(f"Input must be less than {MAX_INPUT_CHARS:,} characters", 400, "INPUT_TOO_LONG")
    return text


@router.post("/explain")
async def v1_explain(
    payload: Optional[ExplainRequest] = Body(default=None),
    state: State = Depends(get_state),
) -> Dict[str, Any]:
    text = validate_input(payload.input if payload is not None else None)
    return await state.pipeline.produce_brief(text)
