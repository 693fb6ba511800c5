from __future__ import annotations

from dataclasses import dataclass

# Verb used for input typed without a leading slash.
BARE_MOVEMENT_VERB = "go"


@dataclass(frozen=True, slots=True)
class Command:
    raw: str
    verb: str
    rest: str
    # True when the player typed an exit name without "/go".
    implicit: bool = False


def parse_command(raw: str) -> Command | None:
    """Split a submission into verb and argument text. Returns None for blank input."""

    text = raw.strip()
    if not text:
        return None

    if not text.startswith("/"):
        return Command(raw=raw, verb=BARE_MOVEMENT_VERB, rest=text, implicit=True)

    head, _, rest = text[1:].partition(" ")
    return Command(raw=raw, verb=head.casefold(), rest=rest.strip())
