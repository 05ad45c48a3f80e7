"""Session identity and the file-name prefix derived from it."""

from __future__ import annotations

from dataclasses import dataclass

# Prefix used by the log shared across all sessions
GLOBAL_PREFIX = "GLOBAL"


@dataclass(frozen=True, slots=True)
class SessionID:
    begin_string: str
    sender_comp_id: str
    target_comp_id: str
    session_qualifier: str = ""

    def __str__(self) -> str:
        text = f"{self.begin_string}:{self.sender_comp_id}->{self.target_comp_id}"
        if self.session_qualifier:
            text += f":{self.session_qualifier}"
        return text


def generate_prefix(session_id: SessionID) -> str:
    """Return ``BEGIN-SENDER-TARGET[-QUALIFIER]`` for *session_id*."""
    prefix = "-".join(
        [
            str(session_id.begin_string),
            str(session_id.sender_comp_id),
            str(session_id.target_comp_id),
        ]
    )
    qualifier = str(session_id.session_qualifier or "")
    if qualifier:
        prefix += "-" + qualifier
    return prefix
