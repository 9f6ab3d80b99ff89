import time
from typing import Optional

from pydantic import BaseModel
from pyredux import combine_reducers, create_reducer, on
from counter_actions import increment, decrement, reset, increment_by, set_label


# ====== Model Definition ======
class CounterState(BaseModel):
    count: int = 0
    last_updated: Optional[float] = None


# ====== Handlers ======
def _with_count(state: CounterState, count: int) -> CounterState:
    # 返回新的狀態物件，不修改原狀態
    return state.model_copy(update={"count": count, "last_updated": time.time()})


def increment_handler(state: CounterState, action) -> CounterState:
    return _with_count(state, state.count + 1)


def decrement_handler(state: CounterState, action) -> CounterState:
    return _with_count(state, state.count - 1)


def reset_handler(state: CounterState, action) -> CounterState:
    return _with_count(state, action.payload)


def increment_by_handler(state: CounterState, action) -> CounterState:
    return _with_count(state, state.count + action.payload)


# ====== Reducers ======
counter_reducer = create_reducer(
    CounterState(),
    on(increment, increment_handler),
    on(decrement, decrement_handler),
    on(reset, reset_handler),
    on(increment_by, increment_by_handler),
)

label_reducer = create_reducer(
    "",
    on(set_label, lambda state, action: action.payload),
)

root_reducer = combine_reducers({
    "counter": counter_reducer,
    "label": label_reducer,
})
