"""
PyRedux 的類型定義。

僅包含類型別名與協議，沒有實際執行邏輯。
"""

from typing import Any, Callable, Optional, Protocol, TypeVar

S = TypeVar("S")
A = TypeVar("A")

# (state, action) -> next_state
Reducer = Callable[[Optional[S], A], S]
Dispatch = Callable[[Any], Any]
NextDispatch = Dispatch
Listener = Callable[[], None]
Unsubscribe = Callable[[], None]
GetState = Callable[[], Any]


class MiddlewareAPIProtocol(Protocol):
    """中介軟體可使用的能力介面。"""

    def get_state(self) -> Any: ...

    def dispatch(self, action: Any) -> Any: ...


# api -> next -> dispatch
MiddlewareFunction = Callable[[NextDispatch], Dispatch]
Middleware = Callable[[MiddlewareAPIProtocol], MiddlewareFunction]

# (reducer, preloaded_state) -> Store
StoreCreator = Callable[..., Any]
StoreEnhancer = Callable[[StoreCreator], StoreCreator]


class Observer(Protocol):
    """可接收狀態快照的觀察者；next 為可選方法。"""

    def next(self, state: Any) -> None: ...
