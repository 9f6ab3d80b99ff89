"""
Reducer composition tests.

Covers:
  - Initial state assembly and filtering of non-callable entries
  - Reference identity when nothing changes and structural sharing otherwise
  - Deferred shape assertion errors (INIT and unknown-type probes)
  - Per-key None results naming the key and action type
  - Development-only shape warnings and their suppression in production
"""

import logging

import pytest

from pyredux import (
    Action,
    ActionTypes,
    ReducerError,
    combine_reducers,
    create_reducer,
    create_store,
    get_action_type,
    on,
)
from pyredux.reducers import unexpected_state_shape_warning


def items(state=None, action=None):
    if state is None:
        state = ()
    if get_action_type(action) == "ADD_ITEM":
        return state + (action["item"],)
    return state


def flag(state=None, action=None):
    if state is None:
        state = False
    if get_action_type(action) == "TOGGLE":
        return not state
    return state


def warnings_from(caplog):
    return [r.getMessage() for r in caplog.records if r.name == "pyredux"]


# ============================================================================
# 1. Composition
# ============================================================================

class TestCombination:
    def test_builds_initial_state_from_sub_reducers(self, counter_reducer):
        reducer = combine_reducers({"counter": counter_reducer, "items": items})
        state = reducer(None, Action(ActionTypes.INIT))
        assert state == {"counter": {"count": 0}, "items": ()}

    def test_non_callable_entries_are_ignored(self, counter_reducer):
        reducer = combine_reducers({"counter": counter_reducer, "junk": 42, "missing": None})
        assert reducer(None, {"type": "ANY"}) == {"counter": {"count": 0}}
        assert reducer.reducer_keys == ("counter",)

    def test_unknown_action_returns_same_object(self, counter_reducer):
        reducer = combine_reducers({"counter": counter_reducer, "items": items})
        state = reducer(None, {"type": "ANY"})
        assert reducer(state, {"type": "NOBODY_HANDLES_THIS"}) is state

    def test_only_changed_slice_is_replaced(self, counter_reducer):
        reducer = combine_reducers({"counter": counter_reducer, "items": items})
        state = reducer(None, {"type": "ANY"})

        next_state = reducer(state, {"type": "ADD_ITEM", "item": "apple"})

        assert next_state is not state
        assert next_state["items"] == ("apple",)
        assert next_state["counter"] is state["counter"]

    def test_works_as_store_reducer(self, counter_reducer):
        store = create_store(combine_reducers({"counter": counter_reducer, "flag": flag}))
        store.dispatch({"type": "TOGGLE"})
        store.dispatch({"type": "INCREMENT"})
        assert store.get_state() == {"counter": {"count": 1}, "flag": True}

    def test_preloaded_state_is_used(self, counter_reducer):
        store = create_store(
            combine_reducers({"counter": counter_reducer, "flag": flag}),
            {"counter": {"count": 7}, "flag": True},
        )
        assert store.get_state() == {"counter": {"count": 7}, "flag": True}

    def test_nested_combination(self, counter_reducer):
        reducer = combine_reducers({
            "ui": combine_reducers({"flag": flag}),
            "counter": counter_reducer,
        })
        state = reducer(None, {"type": "ANY"})
        toggled = reducer(state, {"type": "TOGGLE"})
        assert toggled == {"ui": {"flag": True}, "counter": {"count": 0}}
        assert toggled["counter"] is state["counter"]


# ============================================================================
# 2. Shape assertions
# ============================================================================

class TestShapeAssertion:
    def test_none_for_unknown_type_throws_lazily(self):
        def strict(state=None, action=None):
            if get_action_type(action) == ActionTypes.INIT:
                return 0
            return None

        reducer = combine_reducers({"strict": strict})

        with pytest.raises(ReducerError, match="probed with a random type"):
            reducer(None, {"type": "ANY"})

    def test_first_dispatch_surfaces_the_error(self):
        def strict(state=None, action=None):
            if get_action_type(action) == ActionTypes.INIT:
                return 0
            return None

        reducer = combine_reducers({"strict": strict})
        with pytest.raises(ReducerError) as excinfo:
            create_store(reducer)
        assert excinfo.value.reducer_name == "strict"

    def test_subscript_style_reducer_passes_probes(self):
        def counter(state=None, action=None):
            if state is None:
                state = 0
            if action["type"] == "INC":
                return state + 1
            return state

        reducer = combine_reducers({"n": counter})
        store = create_store(reducer)
        store.dispatch({"type": "INC"})
        assert store.get_state() == {"n": 1}

    def test_none_during_initialization(self):
        reducer = combine_reducers({"empty": lambda state=None, action=None: state})
        with pytest.raises(ReducerError, match="during initialization"):
            reducer(None, {"type": "ANY"})

    def test_same_error_raised_on_every_call(self):
        reducer = combine_reducers({"empty": lambda state=None, action=None: state})
        with pytest.raises(ReducerError) as first:
            reducer(None, {"type": "ANY"})
        with pytest.raises(ReducerError) as second:
            reducer(None, {"type": "ANY"})
        assert first.value is second.value

    def test_probe_failure_from_exception_is_deferred(self):
        def broken(state=None, action=None):
            raise RuntimeError("broken reducer")

        reducer = combine_reducers({"broken": broken})
        with pytest.raises(RuntimeError, match="broken reducer"):
            reducer(None, {"type": "ANY"})

    def test_none_for_specific_action_names_key_and_type(self):
        def fragile(state=None, action=None):
            if state is None:
                return 0
            if get_action_type(action) == "BREAK":
                return None
            return state

        reducer = combine_reducers({"fragile": fragile})
        state = reducer(None, {"type": "ANY"})

        with pytest.raises(ReducerError) as excinfo:
            reducer(state, {"type": "BREAK"})

        message = str(excinfo.value)
        assert '"fragile"' in message
        assert "'BREAK'" in message
        assert excinfo.value.action_type == "BREAK"


# ============================================================================
# 3. Development diagnostics
# ============================================================================

class TestShapeWarnings:
    def test_warns_about_missing_reducer(self, counter_reducer, caplog):
        with caplog.at_level(logging.WARNING, logger="pyredux"):
            combine_reducers({"counter": counter_reducer, "ghost": None})
        assert warnings_from(caplog) == ['No reducer provided for key "ghost"']

    def test_warns_about_unexpected_keys_once(self, counter_reducer, caplog):
        reducer = combine_reducers({"counter": counter_reducer})
        with caplog.at_level(logging.WARNING, logger="pyredux"):
            reducer({"counter": {"count": 0}, "stale": 1}, {"type": "ANY"})
            reducer({"counter": {"count": 0}, "stale": 1}, {"type": "ANY"})

        messages = warnings_from(caplog)
        assert len(messages) == 1
        assert 'Unexpected key "stale"' in messages[0]
        assert "previous state received by the reducer" in messages[0]

    def test_preloaded_state_wording_on_init(self, counter_reducer, caplog):
        reducer = combine_reducers({"counter": counter_reducer})
        with caplog.at_level(logging.WARNING, logger="pyredux"):
            create_store(reducer, {"counter": {"count": 0}, "a": 1, "b": 2})

        messages = warnings_from(caplog)
        assert len(messages) == 1
        assert 'Unexpected keys "a", "b"' in messages[0]
        assert "preloaded_state argument passed to create_store" in messages[0]

    def test_no_warning_on_replace(self, counter_reducer, caplog):
        reducer = combine_reducers({"counter": counter_reducer})
        with caplog.at_level(logging.WARNING, logger="pyredux"):
            reducer({"counter": {"count": 0}, "old": 1}, Action(ActionTypes.REPLACE))
            reducer({"counter": {"count": 0}, "old": 1}, {"type": "ANY"})
        assert warnings_from(caplog) == []

    def test_warns_about_non_mapping_state(self, counter_reducer, caplog):
        reducer = combine_reducers({"counter": counter_reducer})
        with caplog.at_level(logging.WARNING, logger="pyredux"):
            state = reducer(5, {"type": "ANY"})

        assert state == {"counter": {"count": 0}}
        messages = warnings_from(caplog)
        assert len(messages) == 1
        assert 'unexpected type of "int"' in messages[0]

    def test_warns_when_no_reducers(self, caplog):
        reducer = combine_reducers({})
        with caplog.at_level(logging.WARNING, logger="pyredux"):
            assert reducer(None, {"type": "ANY"}) == {}
        assert "does not have a valid reducer" in warnings_from(caplog)[0]

    def test_production_suppresses_warnings(self, production, counter_reducer, caplog):
        with caplog.at_level(logging.WARNING, logger="pyredux"):
            reducer = combine_reducers({"counter": counter_reducer, "ghost": None})
            reducer({"counter": {"count": 0}, "stale": 1}, {"type": "ANY"})
        assert warnings_from(caplog) == []

    def test_helper_returns_none_when_shape_matches(self, counter_reducer):
        message = unexpected_state_shape_warning(
            {"counter": {"count": 0}}, {"counter": counter_reducer}, {"type": "ANY"}, set()
        )
        assert message is None


# ============================================================================
# 4. create_reducer / on
# ============================================================================

class TestCreateReducer:
    def test_handles_registered_types(self):
        reducer = create_reducer(
            0,
            on("ADD", lambda state, action: state + action.payload),
            ("RESET", lambda state, action: 0),
        )
        state = reducer(None, Action("ADD", 5))
        assert state == 5
        assert reducer(state, Action("RESET")) == 0

    def test_unknown_type_returns_same_state(self):
        initial = {"value": 1}
        reducer = create_reducer(initial)
        assert reducer(None, {"type": "ANY"}) is initial

    def test_accepts_action_creators(self):
        from pyredux import create_action

        increment = create_action("[Counter] Increment")
        reducer = create_reducer(0, on(increment, lambda state, action: state + 1))
        assert reducer(0, increment()) == 1
        assert list(reducer.handlers) == ["[Counter] Increment"]

    def test_passes_combine_reducers_probes(self):
        reducer = combine_reducers({"count": create_reducer(0)})
        assert reducer(None, {"type": "ANY"}) == {"count": 0}
