"""Instruction preamble for the event-recognition completion call.

The completion service receives :data:`SYSTEM_INSTRUCTION` as its system
instruction and the user's free text, unchanged, as the prompt.  The
instruction pins the output contract the response parser relies on: a
raw JSON array, no markdown.
"""

from __future__ import annotations

SYSTEM_INSTRUCTION = """\
You are an AI assistant that recognizes events from text and outputs them in \
JSON format. Each event should have a title, date (YYYY-MM-DD), and time (HH:MM).

If an event is recurring, include a 'recurrence' field with the recurrence rule \
(e.g., "FREQ=WEEKLY;BYDAY=MO,WE,FR" for an event that occurs every Monday, \
Wednesday, and Friday).

If an event has an alarm, include an 'alarm' field with the number of minutes \
before the event that the alarm should trigger.

Output the events as a JSON array. Do not include markdown formatting in the output."""


def build_user_prompt(text: str) -> str:
    """Return the user prompt for *text*.

    The text is sent as-is; length limits are enforced by the session
    before this point.
    """
    return text
