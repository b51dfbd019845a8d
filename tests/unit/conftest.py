"""
Unit test configuration.

Stops pydantic-settings from reading a developer's .env file so unit tests
see only what they set through monkeypatch.setenv().
"""

import pytest


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})
