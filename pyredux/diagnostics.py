"""
開發期診斷輸出。

警告只是用來協助除錯，不會改變任何控制流程或返回值。
"""

import logging

logger = logging.getLogger("pyredux")


def warning(message: str) -> None:
    """
    以 WARNING 等級輸出一條開發期診斷訊息。

    呼叫端負責在 production 環境下略過呼叫。

    Args:
        message: 警告內容。
    """
    logger.warning(message)
