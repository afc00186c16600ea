"""Run one brief end to end against the configured model and print it.

    python -m busybrief.verify
    python -m busybrief.verify --contract alignment --file notes.txt
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from .config import load_settings
from .errors import AppError
from .logging import setup_logging
from .routers.explain import validate_input
from .services.brief import BriefPipeline

SAMPLE_INPUT = """Context: Slack thread + meeting notes

Slack (Monday, April 22):

Alex (9:14 AM):
We should probably lock scope for the May release this week. QA is already stretched.

Priya (9:18 AM):
Design for permissions cleanup is basically done, final tweaks today or tomorrow.

Jordan (9:21 AM):
Reminder that Marketing needs ~2 weeks lead time if this is shipping mid-May.

Sam (9:24 AM):
Engineering can hit May 20 *if* we don't add anything net-new. Permissions refactor is the big unknown.

Alex (9:30 AM):
Understood. Let's discuss in tomorrow's sync.

---

Meeting Notes, Product / Eng Sync (Tuesday, April 23):

- General agreement that timeline risk has increased due to permissions refactor.
- Discussion around whether to include advanced role templates in the May release.
- Engineering flagged that adding role templates would likely push QA past May 20.
- Product noted that role templates are valuable but not strictly required for launch.
- No explicit decision was called out in the meeting.

---

Follow-up Doc Excerpt (shared Wednesday, April 24):

"Given current resourcing and the importance of hitting the May release window, the proposal is to focus
this release on stabilizing permissions behavior and defer advanced role templates to a subsequent
iteration. This should reduce risk while still delivering meaningful customer value."

Open Questions Noted in Doc:
- Is May 20 still a realistic GA target, or should we plan for late May?
- Does deferring role templates impact any committed customer timelines?

Next Sync:
- Thursday, April 25"""


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Produce one brief with the configured model")
    parser.add_argument("--contract", choices=["terse", "alignment"], help="Override BRIEF_CONTRACT")
    parser.add_argument("--file", type=Path, help="Read input text from this file instead of the sample")
    args = parser.parse_args(argv)

    settings = load_settings()
    if args.contract:
        settings.brief_contract = args.contract
    setup_logging(settings.log_level)

    raw = args.file.read_text(encoding="utf-8") if args.file else SAMPLE_INPUT
    pipeline = BriefPipeline.from_settings(settings)
    try:
        brief = asyncio.run(pipeline.produce_brief(validate_input(raw)))
    except AppError as e:
        print(json.dumps({"ok": False, "error": e.message, "code": e.code}, indent=2), file=sys.stderr)
        return 1
    print(json.dumps(brief, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
