"""Random identifiers for sessions and workspaces."""

from __future__ import annotations

import secrets

# Names workspaces are drawn from.
LOVE_MEMBERS = (
    "emiri", "anna", "sana", "iori", "maika",
    "hana", "shoko", "risa", "kiara", "hitomi",
)


def generate_workspace_name() -> str:
    """Return a member name followed by a dash and four hex digits."""
    suffix = secrets.token_hex(2)
    member = LOVE_MEMBERS[secrets.token_bytes(1)[0] % len(LOVE_MEMBERS)]
    return f"{member}-{suffix}"


def generate_session_id() -> str:
    """Return a random 16-hex-digit session identifier."""
    return secrets.token_hex(8)