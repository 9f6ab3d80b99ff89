from typing import Any, Callable, List, Optional, Tuple

import reactivex
from pydantic import BaseModel, ConfigDict
from reactivex import operators as ops
from reactivex.disposable import Disposable

from .actions import Action, ActionTypes, get_action_type, is_plain_action
from .errors import ActionError, ConfigurationError, ReducerError, ReentrancyError
from .types import Listener, Observer, Reducer, StoreEnhancer, Unsubscribe


class _Registration:
    """一次訂閱的登記項；以物件身份作為取消訂閱的憑證。"""

    __slots__ = ("listener",)

    def __init__(self, listener: Listener):
        self.listener = listener


class ListenerRegistry:
    """
    雙緩衝的監聽器登記表。

    _current_listeners 是正在進行的 dispatch 所迭代的快照，
    _next_listeners 是 subscribe / unsubscribe 修改的暫存列表。
    兩者共用同一個列表時，修改前會先複製（copy-on-write），
    因此正在迭代的快照永遠不會被改動。

    同一個回調可以登記多次，每次登記都有自己的憑證，需各自移除。
    """

    def __init__(self):
        self._current_listeners: List[_Registration] = []
        self._next_listeners: List[_Registration] = self._current_listeners

    def _ensure_can_mutate_next_listeners(self) -> None:
        if self._next_listeners is self._current_listeners:
            # 解除與快照的引用關聯
            self._next_listeners = list(self._current_listeners)

    def add(self, listener: Listener) -> _Registration:
        """
        登記一個監聽器。

        Args:
            listener: 無參數的回調函數。

        Returns:
            此次登記的憑證，用於 remove()。
        """
        registration = _Registration(listener)
        self._ensure_can_mutate_next_listeners()
        self._next_listeners.append(registration)
        return registration

    def remove(self, registration: _Registration) -> bool:
        """
        依憑證移除一次登記。

        Returns:
            是否確實移除了登記項。
        """
        self._ensure_can_mutate_next_listeners()
        for index, candidate in enumerate(self._next_listeners):
            if candidate is registration:
                del self._next_listeners[index]
                return True
        return False

    def snapshot(self) -> Tuple[Listener, ...]:
        """
        將暫存列表提升為目前的快照並返回其中的監聽器。

        之後對登記表的任何修改都只會影響下一次快照。
        """
        self._current_listeners = self._next_listeners
        return tuple(registration.listener for registration in self._current_listeners)

    def __len__(self) -> int:
        return len(self._next_listeners)


class Subscription:
    """StateObservable.subscribe() 返回的訂閱句柄。"""

    def __init__(self, unsubscribe: Unsubscribe):
        self._unsubscribe = unsubscribe

    def unsubscribe(self) -> None:
        self._unsubscribe()

    # 與 reactivex 的 Disposable 介面一致
    dispose = unsubscribe


class StateObservable:
    """
    狀態快照的最小可觀察序列，供反應式函式庫互通使用。

    訂閱時立即推送一次目前狀態，之後每次 dispatch 完成後再推送一次。
    序列不會自行結束，必須明確取消訂閱。
    """

    def __init__(self, get_state: Callable[[], Any], subscribe: Callable[[Listener], Unsubscribe]):
        self._get_state = get_state
        self._subscribe = subscribe

    def subscribe(self, observer: Observer) -> Subscription:
        """
        訂閱狀態變化。

        Args:
            observer: 具有可選 next(state) 方法的物件；
                也接受 reactivex 風格的 on_next(state)。

        Returns:
            Subscription: 可用 unsubscribe() 停止推送。
        """
        if observer is None:
            raise TypeError("Expected the observer to be an object.")

        def observe_state() -> None:
            emit = getattr(observer, "next", None) or getattr(observer, "on_next", None)
            if emit is not None:
                emit(self._get_state())

        observe_state()
        return Subscription(self._subscribe(observe_state))

    def to_rx(self) -> reactivex.Observable:
        """
        轉換為 reactivex 的 Observable。

        Returns:
            每次訂閱都會註冊一個新監聽器的冷 Observable。
        """
        def on_subscribe(observer, scheduler=None):
            def observe_state() -> None:
                observer.on_next(self._get_state())

            observe_state()
            return Disposable(self._subscribe(observe_state))

        return reactivex.create(on_subscribe)

    def select(self, selector: Optional[Callable[[Any], Any]] = None) -> reactivex.Observable:
        """
        選擇狀態的一部分進行觀察。

        Args:
            selector: 一個函數，接收整個狀態並返回希望觀察的部分。

        Returns:
            只在選取值改變時才發出的 Observable。
        """
        source = self.to_rx()
        if selector is not None:
            source = source.pipe(ops.map(selector))
        return source.pipe(ops.distinct_until_changed())


class Store(BaseModel):
    """
    Store 對外公開的操作集合。

    這是一個不可變記錄；enhancer 透過 model_copy(update=...) 取得淺拷貝並替換其中的操作，
    其餘操作仍然指向同一個 StoreEngine。
    """

    model_config = ConfigDict(frozen=True)

    dispatch: Callable[..., Any]
    subscribe: Callable[..., Unsubscribe]
    get_state: Callable[[], Any]
    replace_reducer: Callable[..., None]
    observable: Callable[[], StateObservable]

    @property
    def state(self) -> Any:
        """目前狀態的快照。"""
        return self.get_state()


class StoreEngine:
    """
    狀態容器，管理應用狀態並通知訂閱者狀態變更。

    引擎只有兩個階段：Idle 與 Dispatching。reducer 執行期間處於 Dispatching，
    此時 get_state、subscribe、unsubscribe 與 dispatch 都會拋出 ReentrancyError。
    """

    def __init__(self, reducer: Reducer, preloaded_state: Any = None):
        """
        建立引擎並立即分發一次 INIT，讓 reducer 產生初始狀態。

        Args:
            reducer: 接收 (state, action) 並返回下一個狀態的函數。
            preloaded_state: 可選的初始狀態。
        """
        if not callable(reducer):
            raise ConfigurationError("Expected the reducer to be a function.", component="reducer")

        self._current_reducer = reducer
        self._current_state = preloaded_state
        self._listeners = ListenerRegistry()
        self._is_dispatching = False

        # 建立時分發 INIT，讓每個 reducer 返回自己的初始狀態
        self.dispatch(Action(ActionTypes.INIT))

    @property
    def is_dispatching(self) -> bool:
        return self._is_dispatching

    def get_state(self) -> Any:
        """
        讀取 Store 管理的狀態樹。

        Returns:
            應用的當前狀態。
        """
        if self._is_dispatching:
            raise ReentrancyError(
                "You may not call store.get_state() while the reducer is executing. "
                "The reducer has already received the state as an argument. "
                "Pass it down from the top reducer instead of reading it from the store.",
                operation="get_state",
            )
        return self._current_state

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """
        新增一個變更監聽器，每次 dispatch 完成後都會被呼叫。

        監聽器列表在每次 dispatch 通知前做快照。在監聽器被呼叫期間 subscribe
        或 unsubscribe，不會影響正在進行的這次通知，只會影響之後的 dispatch。

        Args:
            listener: 每次 dispatch 後要呼叫的無參數回調。

        Returns:
            用於移除此監聽器的函數；重複呼叫不會有任何效果。
        """
        if not callable(listener):
            raise ConfigurationError("Expected the listener to be a function.", component="listener")

        if self._is_dispatching:
            raise ReentrancyError(
                "You may not call store.subscribe() while the reducer is executing. "
                "If you would like to be notified after the store has been updated, "
                "subscribe beforehand and call store.get_state() in the callback.",
                operation="subscribe",
            )

        registration = self._listeners.add(listener)
        is_subscribed = True

        def unsubscribe() -> None:
            nonlocal is_subscribed
            if not is_subscribed:
                return

            if self._is_dispatching:
                raise ReentrancyError(
                    "You may not unsubscribe from a store listener while the reducer is executing.",
                    operation="unsubscribe",
                )

            is_subscribed = False
            self._listeners.remove(registration)

        return unsubscribe

    def dispatch(self, action: Any) -> Any:
        """
        分發一個動作，這是觸發狀態變更的唯一方式。

        Args:
            action: Action 實例或帶有 "type" 鍵的映射。

        Returns:
            傳入的 Action。
        """
        if not is_plain_action(action):
            raise ActionError(
                "Actions must be Action instances or mappings. "
                "Use custom middleware for other kinds of actions.",
                action=action,
            )

        action_type = get_action_type(action)
        if action_type is None:
            raise ActionError(
                'Actions may not have a None "type" property. Have you misspelled a constant?',
                action=action,
            )

        if self._is_dispatching:
            raise ReentrancyError("Reducers may not dispatch actions.", operation="dispatch")

        try:
            self._is_dispatching = True
            next_state = self._current_reducer(self._current_state, action)
        finally:
            self._is_dispatching = False

        if next_state is None:
            raise ReducerError(
                f"Given action {action_type!r}, the reducer returned None. "
                f"To ignore an action, you must explicitly return the previous state.",
                action_type=action_type,
            )
        self._current_state = next_state

        for listener in self._listeners.snapshot():
            listener()

        return action

    def replace_reducer(self, next_reducer: Reducer) -> None:
        """
        替換目前用來計算狀態的 reducer，並分發 REPLACE 讓新的 reducer 重新推導狀態。

        Args:
            next_reducer: 取代現有 reducer 的新函數。
        """
        if not callable(next_reducer):
            raise ConfigurationError(
                "Expected the next_reducer to be a function.", component="next_reducer"
            )

        self._current_reducer = next_reducer
        self.dispatch(Action(ActionTypes.REPLACE))

    def observable(self) -> StateObservable:
        return StateObservable(self.get_state, self.subscribe)

    def to_store(self) -> Store:
        return Store(
            dispatch=self.dispatch,
            subscribe=self.subscribe,
            get_state=self.get_state,
            replace_reducer=self.replace_reducer,
            observable=self.observable,
        )


def create_store(
    reducer: Reducer,
    preloaded_state: Any = None,
    enhancer: Optional[StoreEnhancer] = None,
) -> Store:
    """
    創建一個保存狀態樹的 Store。

    Args:
        reducer: 接收目前狀態與 Action，返回下一個狀態的函數。
        preloaded_state: 可選的初始狀態。若 reducer 由 combine_reducers 產生，
            這必須是與其鍵相同的映射。
        enhancer: 可選的 Store 增強器，例如 apply_middleware()。

    Returns:
        Store: 可讀取狀態、分發 Action 與訂閱變更的 Store。

    範例:
        >>> store = create_store(counter_reducer, apply_middleware(LoggerMiddleware))
    """
    # 允許 create_store(reducer, enhancer) 的呼叫方式
    if callable(preloaded_state) and enhancer is None:
        enhancer = preloaded_state
        preloaded_state = None

    if enhancer is not None:
        if not callable(enhancer):
            raise ConfigurationError("Expected the enhancer to be a function.", component="enhancer")
        # 建立 Store 的責任完全交給 enhancer 鏈
        return enhancer(create_store)(reducer, preloaded_state)

    return StoreEngine(reducer, preloaded_state).to_store()
