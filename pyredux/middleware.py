"""
PyRedux 的中介軟體模組。

此模組提供 apply_middleware 增強器，以及幾個可直接使用的中介軟體，
用於在動作分發過程中插入自定義邏輯，例如日誌記錄與性能監控。

中介軟體的契約為 api -> next_dispatch -> dispatch：
    def my_middleware(api):
        def middleware(next_dispatch):
            def dispatch(action):
                ...
                return next_dispatch(action)
            return dispatch
        return middleware
"""

import contextlib
import datetime
import inspect
import logging
import time
from typing import Any, Dict, Generator, List, Optional, Union

from .actions import get_action_type
from .compose import compose
from .errors import ConfigurationError
from .types import (
    Dispatch,
    GetState,
    Middleware,
    MiddlewareAPIProtocol,
    MiddlewareFunction,
    NextDispatch,
    StoreCreator,
    StoreEnhancer,
)

logger = logging.getLogger("pyredux.middleware")

ActionContext = Dict[str, Any]


class MiddlewareAPI:
    """
    傳給每個中介軟體的固定能力介面。

    dispatch 會轉發到組合完成後的 dispatch，因此中介軟體從這裡分發的 action
    會重新經過整條中介鏈。
    """

    def __init__(self, get_state: GetState, dispatch: Dispatch):
        self._get_state = get_state
        self._dispatch = dispatch

    def get_state(self) -> Any:
        return self._get_state()

    def dispatch(self, action: Any, *args: Any, **kwargs: Any) -> Any:
        return self._dispatch(action, *args, **kwargs)

    @property
    def state(self) -> Any:
        return self._get_state()


def _dispatch_while_constructing(*args: Any, **kwargs: Any) -> Any:
    raise ConfigurationError(
        "Dispatching while constructing your middleware is not allowed. "
        "Other middleware would not be applied to this dispatch.",
        component="middleware",
    )


def apply_middleware(*middlewares: Union[Middleware, type]) -> StoreEnhancer:
    """
    創建一個將中介軟體套用到 Store dispatch 的增強器。

    第一個中介軟體在最外層，會最先看到每一個 action（包括後面的中介軟體
    再分發的 action）；最後一個中介軟體最靠近原始的 dispatch。

    Args:
        *middlewares: 要套用的中介軟體，可以是函數、實例或類別。
            類別會在每個 Store 建立時各自實例化，不同 Store 之間不共用狀態。

    Returns:
        一個 Store 增強器。

    範例:
        >>> store = create_store(reducer, apply_middleware(LoggerMiddleware, thunk))
    """
    def enhancer(create_store: StoreCreator) -> StoreCreator:
        def create(*args: Any, **kwargs: Any) -> Any:
            store = create_store(*args, **kwargs)
            # 接受類和實例，如果是類則直接實例化
            instances: List[Middleware] = [
                m() if inspect.isclass(m) else m for m in middlewares
            ]
            dispatch: Dispatch = _dispatch_while_constructing

            # 透過閉包讀取 dispatch 變數，組合完成後就會指向最終的 dispatch
            api = MiddlewareAPI(
                store.get_state,
                lambda *a, **kw: dispatch(*a, **kw),
            )
            chain: List[MiddlewareFunction] = [middleware(api) for middleware in instances]
            dispatch = compose(*chain)(store.dispatch)

            return store.model_copy(update={"dispatch": dispatch})

        return create

    return enhancer


# ———— Base Middleware ————
class BaseMiddleware:
    """
    基礎中介類，以鉤子的形式介入動作分發的流程。

    子類只需覆寫 on_next、on_complete 或 on_error，
    __call__ 會把它們包裝成標準的 api -> next -> dispatch 中介軟體。
    """

    def __call__(self, api: MiddlewareAPIProtocol) -> MiddlewareFunction:
        def middleware(next_dispatch: NextDispatch) -> Dispatch:
            def dispatch(action: Any) -> Any:
                with self.action_context(action, api.get_state()) as context:
                    context['result'] = next_dispatch(action)
                    context['next_state'] = api.get_state()
                    return context['result']
            return dispatch
        return middleware

    def on_next(self, action: Any, prev_state: Any) -> None:
        """
        在 action 發送給下一層之前調用。

        Args:
            action: 正在 dispatch 的 Action
            prev_state: dispatch 之前的狀態
        """
        pass

    def on_complete(self, next_state: Any, action: Any) -> None:
        """
        在 action 處理完之後調用。

        Args:
            next_state: dispatch 之後的最新狀態
            action: 剛剛 dispatch 的 Action
        """
        pass

    def on_error(self, error: Exception, action: Any) -> None:
        """
        如果 dispatch 過程中拋出異常，則調用此鉤子；異常之後仍會繼續向上拋出。

        Args:
            error: 拋出的異常
            action: 導致異常的 Action
        """
        pass

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        """
        以上下文管理器的形式包裹一次分發的生命週期。

        子類可以覆蓋此方法，但應負責呼叫適當的 hook 方法。

        Args:
            action: 要分發的 Action
            prev_state: 分發前的狀態

        Yields:
            包含上下文數據的字典，可用於在上下文內部與外部之間傳遞數據
        """
        context: ActionContext = {
            'action': action,
            'prev_state': prev_state,
            'next_state': None,
            'result': None,
            'error': None
        }

        self.on_next(action, prev_state)
        try:
            yield context
            if context['next_state'] is not None:
                self.on_complete(context['next_state'], action)
        except Exception as err:
            context['error'] = err
            self.on_error(err, action)
            raise


# ———— LoggerMiddleware ————
class LoggerMiddleware(BaseMiddleware):
    """
    日誌中介，記錄每個 action 發送前和發送後的 state。

    使用場景:
    - 偵錯時需要觀察每次 state 的變化。
    - 確保 action 的執行順序正確。
    """

    def __init__(self, level: int = logging.INFO, log: Optional[logging.Logger] = None):
        self.level = level
        self.log = log or logger
        self._timestamp: Optional[datetime.datetime] = None

    def _stamp(self) -> str:
        if self._timestamp:
            return f"[{self._timestamp}] "
        return ""

    def on_next(self, action: Any, prev_state: Any) -> None:
        self._timestamp = datetime.datetime.now()
        action_type = get_action_type(action)
        self.log.log(self.level, "%sdispatching %s", self._stamp(), action_type)
        self.log.log(self.level, "%sstate before %s: %r", self._stamp(), action_type, prev_state)

    def on_complete(self, next_state: Any, action: Any) -> None:
        self.log.log(
            self.level, "%sstate after %s: %r", self._stamp(), get_action_type(action), next_state
        )

    def on_error(self, error: Exception, action: Any) -> None:
        self.log.error("%serror in %s: %s", self._stamp(), get_action_type(action), error)


# ———— PerformanceMonitorMiddleware ————
class PerformanceMonitorMiddleware(BaseMiddleware):
    """
    性能監控中間件，記錄每種 action 類型的分發耗時（毫秒）。
    """

    def __init__(self, threshold_ms: float = 100, log_all: bool = False):
        """
        Args:
            threshold_ms: 性能警告閾值，單位為毫秒，預設為 100 毫秒
            log_all: 是否記錄所有 action 的耗時，預設只記錄超過閾值的
        """
        self.threshold_ms = threshold_ms
        self.log_all = log_all
        self.metrics: Dict[Any, List[float]] = {}

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        context: ActionContext = {
            'action': action,
            'prev_state': prev_state,
            'next_state': None,
            'result': None,
            'error': None
        }
        action_type = get_action_type(action)
        self.on_next(action, prev_state)
        start_time = time.perf_counter()
        try:
            yield context
        except Exception as err:
            context['error'] = err
            self.on_error(err, action)
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.error("Action %s failed after %.2fms: %s", action_type, elapsed_ms, err)
            raise

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self.metrics.setdefault(action_type, []).append(elapsed_ms)
        if elapsed_ms > self.threshold_ms:
            logger.warning(
                "Action %s took %.2fms, exceeding threshold (%sms)",
                action_type, elapsed_ms, self.threshold_ms,
            )
        elif self.log_all:
            logger.info("Action %s took %.2fms", action_type, elapsed_ms)
        if context['next_state'] is not None:
            self.on_complete(context['next_state'], action)

    def get_metrics(self) -> Dict[Any, Dict[str, float]]:
        """
        獲取性能指標統計信息。

        Returns:
            以 action 類型為鍵，包含 avg、max、min、count 的字典。
        """
        result = {}
        for action_type, times in self.metrics.items():
            if not times:
                continue
            result[action_type] = {
                'avg': sum(times) / len(times),
                'max': max(times),
                'min': min(times),
                'count': len(times)
            }
        return result
