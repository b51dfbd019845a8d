"""
Random code generators — pure, side-effect-free functions.

All generators use the cryptographically secure ``secrets`` module.
"""

from __future__ import annotations

import secrets
import string


def generate_otp_code(length: int = 6) -> str:
    """Generate a cryptographically secure numeric OTP.

    The result is a string so leading zeros survive (``"004312"``).

    Args:
        length: Number of digits (default 6).

    Returns:
        String of random decimal digits.
    """
    if length <= 0:
        raise ValueError("OTP length must be positive")
    return "".join(secrets.choice(string.digits) for _ in range(length))
