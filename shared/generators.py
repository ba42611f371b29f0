"""
Random token generators - pure, side-effect-free functions.

All generators use the ``secrets`` module.
"""

from __future__ import annotations

import secrets

RESET_TOKEN_BYTES = 20


def generate_reset_token(nbytes: int = RESET_TOKEN_BYTES) -> str:
    """Generate a password-reset token.

    Args:
        nbytes: Number of random bytes (default 20).

    Returns:
        Lower-case hex string, two characters per byte (40 by default).
    """
    return secrets.token_hex(nbytes)
