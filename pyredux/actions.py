"""
PyRedux 的 Action 定義模組。

此模組提供 Action 類別、Action 生成器，以及 Store 內部使用的保留生命週期類型。
Actions 是描述狀態變更意圖的不可變對象。
"""
import uuid
from collections.abc import Mapping
from typing import Any, Callable, Dict, Generic, Optional, TypeVar, Union

from immutables import Map

from .errors import ConfigurationError

P = TypeVar("P")


class Action(Generic[P]):
    """
    表示一個有類型和可選負載的動作。

    泛型參數:
        P: 負載的類型

    屬性:
        type: 動作的類型，不可為 None
        payload: 動作的負載數據（可選）

    兩個欄位也可以用下標讀取，因此以 action["type"] 讀取 Action 的 reducer
    同樣能處理 Store 內部分發的 INIT 與 REPLACE。
    """
    __slots__ = ('type', 'payload')

    def __init__(self, type: Any, payload: Optional[P] = None):
        super().__setattr__('type', type)
        super().__setattr__('payload', payload)

    def __setattr__(self, name, value):
        if name not in self.__slots__:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        if hasattr(self, name):
            raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")
        super().__setattr__(name, value)

    # 與映射形式的 Action 相同的唯讀讀取方式：action["type"]、action.get("payload")
    def __getitem__(self, key: str) -> Any:
        if key not in self.__slots__:
            raise KeyError(key)
        return getattr(self, key)

    def __contains__(self, key: object) -> bool:
        return key in self.__slots__

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self.__slots__:
            return default
        return getattr(self, key)

    def __iter__(self):
        return iter(self.__slots__)

    def keys(self):
        return self.__slots__

    def __eq__(self, other):
        if not isinstance(other, Action):
            return False
        return self.type == other.type and self.payload == other.payload

    def __hash__(self):
        return hash((self.type, self.payload))

    def __repr__(self):
        return f"Action(type={self.type!r}, payload={self.payload!r})"


def _random_string() -> str:
    return ".".join(uuid.uuid4().hex[:6])


class ActionTypes:
    """
    Store 保留的生命週期 Action 類型。

    這些類型屬於 "@@pyredux/" 命名空間，應用程式的 reducer 不應該處理它們，
    對於任何未知的類型都應返回目前的狀態。
    """

    INIT = f"@@pyredux/INIT{_random_string()}"
    REPLACE = f"@@pyredux/REPLACE{_random_string()}"

    @staticmethod
    def probe_unknown_action() -> str:
        """每次呼叫都產生一個新的、無法猜測的類型，用於探測 reducer。"""
        return f"@@pyredux/PROBE_UNKNOWN_ACTION{_random_string()}"


def is_plain_action(value: Any) -> bool:
    """
    判斷一個值是否可以作為 Action 分發。

    Action 實例或任何 Mapping（dict、immutables.Map）都視為普通記錄。
    """
    return isinstance(value, (Action, Mapping))


def get_action_type(action: Any) -> Any:
    """
    讀取 Action 的類型，不存在時返回 None。

    Args:
        action: Action 實例或 Mapping。
    """
    if isinstance(action, Action):
        return action.type
    if isinstance(action, Mapping):
        return action.get("type")
    return getattr(action, "type", None)


def _process_payload(payload: Any) -> Any:
    """將字典負載轉換為不可變的 Map。"""
    if isinstance(payload, dict):
        return Map(payload)
    return payload


def create_action(action_type: Any, prepare_fn: Optional[Callable[..., Any]] = None) -> Callable[..., Action[Any]]:
    """
    創建一個 Action 生成器函數。

    Args:
        action_type: Action 的類型標識符
        prepare_fn: 可選的預處理函數，用於在創建 Action 前處理輸入參數

    Returns:
        一個可調用的函數，用於生成指定類型的 Action

    範例:
        >>> increment = create_action("[Counter] Increment")
        >>> increment()  # 返回 Action(type="[Counter] Increment", payload=None)
        >>>
        >>> add = create_action("[Counter] Add", lambda amount: amount)
        >>> add(5)  # 返回 Action(type="[Counter] Add", payload=5)
    """
    def action_creator(*args: Any, **kwargs: Any) -> Action[Any]:
        if prepare_fn:
            return Action(action_type, _process_payload(prepare_fn(*args, **kwargs)))
        if len(args) == 1 and not kwargs:
            return Action(action_type, _process_payload(args[0]))
        if args or kwargs:
            payload: Dict[Union[int, str], Any] = dict(zip(range(len(args)), args))
            payload.update(kwargs)
            return Action(action_type, _process_payload(payload))
        # 無參數，無負載
        return Action(action_type)

    # 添加 type 屬性以便於識別
    action_creator.type = action_type  # type: ignore
    return action_creator


def _bind_action_creator(action_creator: Callable[..., Any], dispatch: Callable[[Any], Any]) -> Callable[..., Any]:
    def bound(*args: Any, **kwargs: Any) -> Any:
        return dispatch(action_creator(*args, **kwargs))

    bound.__name__ = getattr(action_creator, "__name__", "bound_action_creator")
    if hasattr(action_creator, "type"):
        bound.type = action_creator.type  # type: ignore
    return bound


def bind_action_creators(action_creators: Any, dispatch: Callable[[Any], Any]) -> Any:
    """
    將 Action 生成器包裝成呼叫後立即 dispatch 的函數。

    Args:
        action_creators: 單一 Action 生成器，或名稱到生成器的映射。
        dispatch: Store 的 dispatch 函數。

    Returns:
        綁定後的函數；若傳入映射，則返回同名鍵的字典（非可調用的項目會被略過）。

    Raises:
        ConfigurationError: 傳入的既不是函數也不是映射。
    """
    if callable(action_creators):
        return _bind_action_creator(action_creators, dispatch)

    if not isinstance(action_creators, Mapping):
        raise ConfigurationError(
            f"bind_action_creators expected a mapping or a function, instead received "
            f"{type(action_creators).__name__!r}. Did you pass a module instead of its "
            f"action creators?",
            component="bind_action_creators",
        )

    return {
        key: _bind_action_creator(creator, dispatch)
        for key, creator in action_creators.items()
        if callable(creator)
    }
