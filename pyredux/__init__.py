"""
PyRedux：單向資料流的最小狀態管理執行環境。

狀態只能透過純函數 reducer 更新，變更會同步通知監聽器，
並可透過中介軟體與增強器擴充 dispatch。
"""

import logging

from .errors import (
    PyReduxError, ConfigurationError, ActionError, ReentrancyError, ReducerError
)
from .config import Settings, get_settings, configure, reset_settings
from .actions import (
    Action, ActionTypes, create_action, bind_action_creators,
    is_plain_action, get_action_type
)
from .compose import compose
from .reducers import combine_reducers, create_reducer, on
from .store import (
    Store, StoreEngine, ListenerRegistry, StateObservable, Subscription, create_store
)
from .middleware import (
    MiddlewareAPI, apply_middleware, BaseMiddleware, LoggerMiddleware,
    PerformanceMonitorMiddleware
)

logging.getLogger("pyredux").addHandler(logging.NullHandler())

# 匯出所有公開 API
__all__ = [
    # Errors
    "PyReduxError", "ConfigurationError", "ActionError", "ReentrancyError", "ReducerError",

    # Config
    "Settings", "get_settings", "configure", "reset_settings",

    # Actions
    "Action", "ActionTypes", "create_action", "bind_action_creators",
    "is_plain_action", "get_action_type",

    # Composition
    "compose", "combine_reducers", "create_reducer", "on",

    # Store
    "Store", "StoreEngine", "ListenerRegistry", "StateObservable", "Subscription",
    "create_store",

    # Middleware
    "MiddlewareAPI", "apply_middleware", "BaseMiddleware", "LoggerMiddleware",
    "PerformanceMonitorMiddleware",
]
