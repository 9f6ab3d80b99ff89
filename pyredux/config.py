"""
PyRedux 設定模組。

目前只有一個設定項：執行環境。當環境為 production 時，
所有僅供開發使用的診斷警告都會被略過。
"""

import os
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

ENV_VAR = "PYREDUX_ENV"


class Settings(BaseModel):
    """執行期設定。"""

    model_config = ConfigDict(frozen=True)

    environment: str = "development"

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        從環境變數讀取設定。

        Returns:
            Settings: 依 PYREDUX_ENV 建立的設定，未設定時為 development。
        """
        return cls(environment=os.getenv(ENV_VAR, "development"))


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """取得目前的設定，第一次呼叫時從環境變數載入。"""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def configure(**overrides: Any) -> Settings:
    """
    以覆寫值更新目前的設定。

    Args:
        **overrides: 要覆寫的設定欄位，例如 environment="production"。

    Returns:
        更新後的 Settings。
    """
    global _settings
    _settings = get_settings().model_copy(update=overrides)
    return _settings


def reset_settings() -> None:
    """清除快取的設定，下一次 get_settings() 會重新讀取環境變數。"""
    global _settings
    _settings = None


def is_production() -> bool:
    return get_settings().is_production
