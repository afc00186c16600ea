from busybrief.services.prompts import ALIGNMENT, TERSE
from busybrief.services.validator import (
    NO_KEY_POINTS,
    Invalid,
    Valid,
    clean_list,
    is_near,
    validate_payload,
)

SOURCE = (
    "Standup notes. Priya will Send budget to finance by Friday. "
    "Sam mentioned the offsite. Jordan owns QA sign-off next week."
)


def _terse(**overrides):
    body = {"summary": ["Budget is due"], "actions": ["Send budget to finance"], "background": []}
    body.update(overrides)
    return body


def test_minimal_payload_validates():
    result = validate_payload({"summary": ["x"], "actions": [], "background": []}, SOURCE, TERSE)
    assert isinstance(result, Valid)
    assert result.ok is True
    assert result.brief == {"summary": ["x"], "actions": [], "background": []}


def test_non_object_is_invalid():
    result = validate_payload(["summary"], SOURCE, TERSE)
    assert isinstance(result, Invalid)
    assert result.ok is False


def test_missing_or_non_array_field_is_invalid():
    assert isinstance(validate_payload({"summary": [], "actions": []}, SOURCE, TERSE), Invalid)
    assert isinstance(validate_payload(_terse(background="none"), SOURCE, TERSE), Invalid)


def test_alternate_field_names_are_invalid():
    assert isinstance(validate_payload({"key_points": ["x"], "actions": [], "background": []}, SOURCE, TERSE), Invalid)


def test_non_string_tone_or_non_array_details_is_invalid():
    assert isinstance(validate_payload(_terse(tone=3), SOURCE, TERSE), Invalid)
    assert isinstance(validate_payload(_terse(action_details={"action": "x"}), SOURCE, TERSE), Invalid)


def test_arrays_are_trimmed_filtered_and_capped():
    payload = _terse(summary=[" a ", "", 5, "b", None, "c", "d"], background=["  "] + [f"bg {i}" for i in range(12)])
    brief = validate_payload(payload, SOURCE, TERSE).brief
    assert brief["summary"] == ["a", "b", "c"]
    assert len(brief["background"]) == 10
    assert brief["background"][0] == "bg 0"


def test_clean_list_is_idempotent():
    items = ["  one", "", "two ", 3, "three", "four"]
    once = clean_list(items, 3)
    assert clean_list(once, 3) == once


def test_empty_summary_gets_placeholder():
    brief = validate_payload(_terse(summary=["", "   "]), SOURCE, TERSE).brief
    assert brief["summary"] == [NO_KEY_POINTS]


def test_terse_tone_is_normalized_or_dropped():
    assert validate_payload(_terse(tone="  Urgent "), SOURCE, TERSE).brief["tone"] == "urgent"
    assert "tone" not in validate_payload(_terse(tone="critical"), SOURCE, TERSE).brief


def test_alignment_status_accepts_any_string():
    payload = {
        "summary": ["x"],
        "decisions": [],
        "next_steps": [],
        "open_questions": [],
        "risks": [],
        "decision_status": " Proposed ",
    }
    assert validate_payload(payload, SOURCE, ALIGNMENT).brief["decision_status"] == "proposed"


def test_detail_tokens_near_action_are_kept():
    payload = _terse(
        action_details=[{"action": "Send budget to finance", "people": ["priya", "Jordan"], "dates": ["Friday"]}]
    )
    brief = validate_payload(payload, SOURCE, TERSE).brief
    assert brief["action_details"] == [{"action": "Send budget to finance", "people": ["priya", "Jordan"], "dates": ["Friday"]}]
    assert brief["actions"] == ["Send budget to finance"]


def test_token_outside_window_is_dropped():
    source = "Send budget" + " filler" * 20 + " tomorrow" + " filler" * 100 + " David"
    payload = {
        "summary": ["x"],
        "actions": ["Send budget"],
        "background": [],
        "action_details": [{"action": "Send budget", "people": ["David"], "dates": ["tomorrow"]}],
    }
    brief = validate_payload(payload, source, TERSE).brief
    assert brief["action_details"] == [{"action": "Send budget", "dates": ["tomorrow"]}]


def test_detail_without_surviving_tokens_is_discarded():
    source = "x" * 50 + "Send budget" + " padding" * 700 + " David is on holiday"
    assert source.index("David") > 4000
    payload = {
        "summary": ["x"],
        "actions": ["Send budget"],
        "background": [],
        "action_details": [{"action": "Send budget", "people": ["David"]}],
    }
    brief = validate_payload(payload, source, TERSE).brief
    assert "action_details" not in brief
    assert brief["actions"] == ["Send budget"]


def test_later_token_occurrence_can_satisfy_window():
    source = "Friday was busy. " + "z" * 400 + " Please Send budget on Friday."
    assert is_near(source.lower(), "friday", source.lower().find("send budget"))
    payload = _terse(action_details=[{"action": "Send budget", "dates": ["Friday"]}])
    assert validate_payload(payload, source, TERSE).brief["action_details"] == [{"action": "Send budget", "dates": ["Friday"]}]


def test_detail_with_action_absent_from_source_is_discarded():
    payload = _terse(action_details=[{"action": "Book the venue", "people": ["Sam"]}])
    assert "action_details" not in validate_payload(payload, SOURCE, TERSE).brief


def test_terse_appends_detail_action_missing_from_actions():
    payload = _terse(actions=[], action_details=[{"action": "QA sign-off", "people": ["Jordan"]}])
    brief = validate_payload(payload, SOURCE, TERSE).brief
    assert brief["actions"] == ["QA sign-off"]
    assert brief["action_details"] == [{"action": "QA sign-off", "people": ["Jordan"]}]


def test_terse_lists_action_even_when_detail_is_dropped():
    source = SOURCE + " pad" * 100 + " Bob"
    payload = _terse(actions=[], action_details=[{"action": "QA sign-off", "people": ["Bob"]}])
    brief = validate_payload(payload, source, TERSE).brief
    assert brief["actions"] == ["QA sign-off"]
    assert "action_details" not in brief


def test_terse_drops_detail_when_actions_are_full():
    actions = [f"task {i}" for i in range(10)]
    payload = _terse(actions=actions, action_details=[{"action": "QA sign-off", "people": ["Jordan"]}])
    brief = validate_payload(payload, SOURCE, TERSE).brief
    assert brief["actions"] == actions
    assert "action_details" not in brief


def test_alignment_requires_detail_action_in_next_steps():
    payload = {
        "summary": ["x"],
        "decisions": [],
        "next_steps": ["Send budget to finance"],
        "open_questions": [],
        "risks": [],
        "action_details": [
            {"action": "Send budget to finance", "people": ["Priya"]},
            {"action": "QA sign-off", "people": ["Jordan"]},
        ],
    }
    brief = validate_payload(payload, SOURCE, ALIGNMENT).brief
    assert brief["action_details"] == [{"action": "Send budget to finance", "people": ["Priya"]}]
    assert brief["next_steps"] == ["Send budget to finance"]


def test_every_kept_token_is_within_window_of_its_action():
    source = (
        "Monday: Priya to draft the plan. " + "." * 300 + " Sam to review the plan by Wednesday. "
        + "." * 300 + " Alex joins Thursday."
    )
    payload = _terse(
        actions=["draft the plan", "review the plan"],
        action_details=[
            {"action": "draft the plan", "people": ["Priya", "Sam", "Alex"], "dates": ["Monday", "Wednesday", "Thursday"]},
            {"action": "review the plan", "people": ["Priya", "Sam", "Alex"], "dates": ["Monday", "Wednesday", "Thursday"]},
        ],
    )
    brief = validate_payload(payload, source, TERSE).brief
    lower = source.lower()
    for detail in brief["action_details"]:
        anchor = lower.find(detail["action"].lower())
        for token in detail.get("people", []) + detail.get("dates", []):
            assert is_near(lower, token, anchor)
    assert brief["action_details"][0] == {"action": "draft the plan", "people": ["Priya"], "dates": ["Monday"]}
