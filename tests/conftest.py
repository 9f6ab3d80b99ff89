"""
PyRedux test configuration.

Every test starts from the default (development) settings so that
diagnostics are emitted unless a test opts into production.
"""

import pytest

from pyredux import configure, get_action_type, reset_settings


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    monkeypatch.delenv("PYREDUX_ENV", raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def production():
    return configure(environment="production")


def counter(state=None, action=None):
    if state is None:
        state = {"count": 0}
    action_type = get_action_type(action)
    if action_type == "INCREMENT":
        return {"count": state["count"] + 1}
    if action_type == "DECREMENT":
        return {"count": state["count"] - 1}
    return state


@pytest.fixture
def counter_reducer():
    return counter
