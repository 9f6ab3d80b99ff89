"""
PyRedux 錯誤處理模組。

所有由核心拋出的錯誤都屬於程式設計錯誤（配置或使用方式錯誤），
會立即向上拋出，核心內部不會捕獲或重試。
"""

from typing import Any, Dict, Optional


class PyReduxError(Exception):
    """所有 PyRedux 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        將錯誤轉換為可序列化的字典。

        Returns:
            包含錯誤類型、訊息與細節的字典。
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": dict(self.details),
        }

    def __str__(self) -> str:
        return self.message


class ConfigurationError(PyReduxError):
    """配置相關的錯誤，例如傳入了不可調用的 reducer、enhancer 或 listener。"""

    def __init__(self, message: str, component: str, **kwargs: Any) -> None:
        super().__init__(message, {"component": component, **kwargs})
        self.component = component


class ActionError(PyReduxError):
    """與 Action 相關的錯誤。"""

    def __init__(self, message: str, action: Any = None, **kwargs: Any) -> None:
        super().__init__(message, {"action": repr(action), **kwargs})
        self.action = action


class ReentrancyError(PyReduxError):
    """在 reducer 執行期間重入 Store 的錯誤。"""

    def __init__(self, message: str, operation: str, **kwargs: Any) -> None:
        super().__init__(message, {"operation": operation, **kwargs})
        self.operation = operation


class ReducerError(PyReduxError):
    """reducer 違反契約（返回 None）時的錯誤。"""

    def __init__(
        self,
        message: str,
        reducer_name: Optional[str] = None,
        action_type: Any = None,
        **kwargs: Any
    ) -> None:
        super().__init__(
            message,
            {"reducer_name": reducer_name, "action_type": action_type, **kwargs},
        )
        self.reducer_name = reducer_name
        self.action_type = action_type
