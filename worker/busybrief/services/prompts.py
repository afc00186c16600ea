"""Prompt contracts: the instruction text and output schema the model is held to.

A contract is static configuration. The validator reads the same contract to
know which fields are required, how many items each may carry and how the
tone/status field and action details are reconciled, so the field names
written into the prompt and the ones checked afterwards can never drift apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple


@dataclass(frozen=True)
class PromptContract:
    name: str
    version: str
    system: str
    shape: str
    rules: Tuple[str, ...]
    # (field, max items) in output order
    fields: Tuple[Tuple[str, int], ...]
    summary_field: str
    actions_field: str
    status_field: str
    # None accepts any string for the status field
    status_values: Optional[FrozenSet[str]]
    # Detail actions must already be listed in actions_field
    require_listed_action: bool
    detail_token_cap: int = 10
    preamble: str = "Extract only what matters from the text."

    @property
    def field_names(self) -> List[str]:
        return [name for name, _ in self.fields]

    def cap_for(self, field: str) -> int:
        for name, cap in self.fields:
            if name == field:
                return cap
        raise KeyError(field)

    def task(self, text: str) -> str:
        rules = "\n".join(f"- {r}" for r in self.rules)
        return (
            f"{self.preamble}\n\n"
            "Return EXACTLY this JSON shape (no additional text). "
            "Only include optional fields when they are present:\n\n"
            f"{self.shape}\n\n"
            f"Rules:\n{rules}\n\n"
            f"Text to analyze:\n{text}"
        )


_SYSTEM = (
    "You are a text compression engine for busy professionals. No opinions. No advice. "
    "No explanations. Never state facts, names or dates that are not in the text. "
    "Output a single valid JSON object only, with the exact keys requested, and no text before or after it."
)

TERSE = PromptContract(
    name="terse",
    version="1",
    system=_SYSTEM,
    shape="""{
  "summary": ["key point 1", "key point 2"],
  "actions": ["action 1", "action 2"],
  "background": ["background 1", "background 2"],
  "tone": "urgent | normal | low" (optional),
  "action_details": [
    {
      "action": "Send revised budget to finance",
      "people": ["David"],
      "dates": ["Friday afternoon", "Feb 12"]
    }
  ] (optional)
}""",
    rules=(
        "summary: 1-3 most important facts or conclusions (strings only)",
        "actions: explicit tasks or deadlines only; if none, return []",
        "background: non-essential context or metadata",
        "tone: overall urgency (urgent | normal | low) only if clear",
        "action_details: only for actions where people or dates are explicitly stated in the text",
        "action_details.action must match an item in actions",
        "never infer names or dates that are not in the text",
        "omit people/dates keys when not present",
    ),
    fields=(("summary", 3), ("actions", 10), ("background", 10)),
    summary_field="summary",
    actions_field="actions",
    status_field="tone",
    status_values=frozenset({"urgent", "normal", "low"}),
    require_listed_action=False,
)

ALIGNMENT = PromptContract(
    name="alignment",
    version="1",
    system=_SYSTEM,
    preamble="Extract where the people in this text agree, what is decided, and what is still open.",
    shape="""{
  "summary": ["key point 1", "key point 2"],
  "decisions": ["decision 1"],
  "next_steps": ["next step 1", "next step 2"],
  "open_questions": ["open question 1"],
  "risks": ["risk 1"],
  "decision_status": "decided | proposed | undecided" (optional),
  "action_details": [
    {
      "action": "Send revised budget to finance",
      "people": ["David"],
      "dates": ["Friday afternoon", "Feb 12"]
    }
  ] (optional)
}""",
    rules=(
        "summary: 1-5 most important facts or conclusions (strings only)",
        "decisions: only decisions explicitly made in the text; a proposal is not a decision; if none, return []",
        "next_steps: explicit tasks, follow-ups or scheduled meetings; if none, return []",
        "open_questions: questions raised in the text that are not answered; if none, return []",
        "risks: risks or blockers stated in the text; if none, return []",
        "decision_status: decided | proposed | undecided, only if clear",
        "action_details: only for next steps where people or dates are explicitly stated in the text",
        "action_details.action must match an item in next_steps",
        "never infer names or dates that are not in the text",
        "omit people/dates keys when not present",
    ),
    fields=(
        ("summary", 5),
        ("decisions", 10),
        ("next_steps", 10),
        ("open_questions", 10),
        ("risks", 10),
    ),
    summary_field="summary",
    actions_field="next_steps",
    status_field="decision_status",
    status_values=None,
    require_listed_action=True,
)

CONTRACTS: Dict[str, PromptContract] = {c.name: c for c in (TERSE, ALIGNMENT)}


def get_contract(name: Optional[str]) -> PromptContract:
    key = (name or TERSE.name).strip().lower()
    try:
        return CONTRACTS[key]
    except KeyError:
        raise ValueError(f"Unknown brief contract {name!r}; expected one of {sorted(CONTRACTS)}") from None


def build_messages(contract: PromptContract, text: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": contract.system},
        {"role": "user", "content": contract.task(text)},
    ]
