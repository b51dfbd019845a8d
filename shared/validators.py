"""
Input normalisation helpers — pure functions.

normalize_email() mirrors what pydantic's ``EmailStr`` does to request
bodies, so addresses read back from the database map to the same ledger key
as addresses submitted by clients.
"""

from __future__ import annotations

from email_validator import EmailNotValidError, validate_email


def normalize_email(value: str) -> str:
    """Return the normalised form of *value* (domain lowercased, IDNA handled).

    Values that are not valid addresses are returned unchanged.
    """
    try:
        return validate_email(value, check_deliverability=False).normalized
    except EmailNotValidError:
        return value
