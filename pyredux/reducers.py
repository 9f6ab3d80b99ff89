from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional, Set, TypeVar

from .actions import ActionTypes, Action, get_action_type
from .config import is_production
from .diagnostics import warning
from .errors import ReducerError
from .types import Reducer

S = TypeVar("S")


def _undefined_state_error_message(key: str, action: Any) -> str:
    action_type = get_action_type(action)
    action_description = f"action {action_type!r}" if action_type is not None else "an action"
    return (
        f'Given {action_description}, reducer "{key}" returned None. '
        f"To ignore an action, you must explicitly return the previous state."
    )


def unexpected_state_shape_warning(
    input_state: Any,
    reducers: Mapping,
    action: Any,
    unexpected_key_cache: Set[Any],
) -> Optional[str]:
    """
    檢查傳入組合 reducer 的狀態是否符合預期的結構。

    Args:
        input_state: 組合 reducer 收到的狀態。
        reducers: 已過濾的子 reducer 映射。
        action: 正在處理的 Action。
        unexpected_key_cache: 已經警告過的多餘鍵，會被就地更新。

    Returns:
        警告訊息；沒有不一致時返回 None。
    """
    reducer_keys = list(reducers)
    action_type = get_action_type(action)
    argument_name = (
        "preloaded_state argument passed to create_store"
        if action_type == ActionTypes.INIT
        else "previous state received by the reducer"
    )

    if not reducer_keys:
        return (
            "Store does not have a valid reducer. Make sure the argument passed "
            "to combine_reducers is a mapping whose values are reducers."
        )

    if not isinstance(input_state, Mapping):
        expected = '", "'.join(map(str, reducer_keys))
        return (
            f'The {argument_name} has unexpected type of "{type(input_state).__name__}". '
            f'Expected argument to be a mapping with the following keys: "{expected}"'
        )

    unexpected_keys = [
        key for key in input_state
        if key not in reducers and key not in unexpected_key_cache
    ]
    unexpected_key_cache.update(unexpected_keys)

    # 替換 reducer 時狀態結構本來就可能改變
    if action_type == ActionTypes.REPLACE:
        return None

    if unexpected_keys:
        noun = "keys" if len(unexpected_keys) > 1 else "key"
        found = '", "'.join(map(str, unexpected_keys))
        expected = '", "'.join(map(str, reducer_keys))
        return (
            f'Unexpected {noun} "{found}" found in {argument_name}. '
            f'Expected to find one of the known reducer keys instead: "{expected}". '
            f"Unexpected keys will be ignored."
        )
    return None


def _assert_reducer_shape(reducers: Mapping) -> None:
    """以 INIT 與隨機類型探測每個子 reducer，確認它們不會返回 None。"""
    for key, reducer in reducers.items():
        initial_state = reducer(None, Action(ActionTypes.INIT))
        if initial_state is None:
            raise ReducerError(
                f'Reducer "{key}" returned None during initialization. '
                f"If the state passed to the reducer is None, you must explicitly "
                f"return the initial state. The initial state may not be None.",
                reducer_name=key,
                action_type=ActionTypes.INIT,
            )

        probe_type = ActionTypes.probe_unknown_action()
        if reducer(None, Action(probe_type)) is None:
            raise ReducerError(
                f'Reducer "{key}" returned None when probed with a random type. '
                f'Don\'t try to handle {ActionTypes.INIT} or other actions in the "@@pyredux/*" '
                f"namespace. They are considered private. Instead, you must return the "
                f"current state for any unknown actions, unless it is None, in which case "
                f"you must return the initial state, regardless of the action type. "
                f"The initial state may not be None.",
                reducer_name=key,
                action_type=probe_type,
            )


def combine_reducers(reducers: Mapping) -> Reducer:
    """
    將值為 reducer 的映射合併為單一 reducer。

    組合後的 reducer 會呼叫每一個子 reducer，並把結果收集到與輸入映射
    相同鍵的狀態中。若沒有任何子狀態改變，返回原本的狀態物件。

    Args:
        reducers: 鍵到 reducer 的映射。子 reducer 對任何 Action 都不可返回 None；
            收到 None 狀態時必須返回初始狀態，收到未知 Action 時返回目前狀態。

    Returns:
        組合後的 reducer。

    範例:
        >>> root_reducer = combine_reducers({
        ...     "counter": counter_reducer,
        ...     "todos": todos_reducer,
        ... })
    """
    development = not is_production()
    final_reducers: Dict[Any, Callable] = {}
    for key, reducer in reducers.items():
        if development and reducer is None:
            warning(f'No reducer provided for key "{key}"')
        if callable(reducer):
            final_reducers[key] = reducer

    unexpected_key_cache: Set[Any] = set()

    # 形狀錯誤延後到第一次呼叫時才拋出
    shape_assertion_error: Optional[Exception] = None
    try:
        _assert_reducer_shape(final_reducers)
    except Exception as err:
        shape_assertion_error = err

    def combination(state: Any = None, action: Any = None) -> Any:
        if shape_assertion_error is not None:
            raise shape_assertion_error

        if state is None:
            state = {}

        if development:
            warning_message = unexpected_state_shape_warning(
                state, final_reducers, action, unexpected_key_cache
            )
            if warning_message is not None:
                warning(warning_message)

        is_mapping = isinstance(state, Mapping)
        has_changed = False
        next_state = {}
        for key, reducer in final_reducers.items():
            previous_state_for_key = state.get(key) if is_mapping else None
            next_state_for_key = reducer(previous_state_for_key, action)
            if next_state_for_key is None:
                raise ReducerError(
                    _undefined_state_error_message(key, action),
                    reducer_name=key,
                    action_type=get_action_type(action),
                )
            next_state[key] = next_state_for_key
            has_changed = has_changed or next_state_for_key is not previous_state_for_key
        return next_state if has_changed else state

    combination.reducer_keys = tuple(final_reducers)  # type: ignore
    return combination


def create_reducer(initial_state: S, *handlers) -> Reducer:
    """
    創建一個 reducer 函式，用於處理狀態變更。

    Args:
        initial_state: 初始狀態，收到 None 狀態時使用。
        *handlers: 一系列 (action_type, handler_fn) 元組或使用 on 函式創建的處理器。

    Returns:
        一個 reducer 函式，根據 action 的類型執行對應的處理邏輯；
        沒有對應處理器的 action 會原樣返回目前狀態。
    """
    action_handlers = {}  # 儲存 action 類型與處理函式的對應關係

    for handler in handlers:
        if isinstance(handler, tuple) and len(handler) == 2:
            action_type, handler_fn = handler
            action_handlers[action_type] = handler_fn
        else:
            action_handlers.update(handler)

    def reducer(state: Optional[S] = None, action: Any = None) -> S:
        if state is None:
            state = initial_state
        if action is None:
            return state

        handler = action_handlers.get(get_action_type(action))
        if handler:
            return handler(state, action)
        return state

    reducer.initial_state = initial_state  # type: ignore
    reducer.handlers = action_handlers  # type: ignore
    return reducer


def on(action_creator_or_type: Any, handler: Callable[[Any, Any], Any]) -> Dict[Any, Callable]:
    """
    創建一個 action 類型與處理函式的映射。

    Args:
        action_creator_or_type: create_action 產生的生成器，或 Action 類型本身。
        handler: 處理該 Action 的函式，接收 (state, action) 並返回新狀態。

    Returns:
        一個包含 {action_type: handler} 的字典。
    """
    if callable(action_creator_or_type) and hasattr(action_creator_or_type, 'type'):
        action_type = action_creator_or_type.type
    else:
        action_type = action_creator_or_type

    return {action_type: handler}
