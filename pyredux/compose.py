import functools
from typing import Any, Callable


def _identity(arg: Any) -> Any:
    return arg


def compose(*funcs: Callable[..., Any]) -> Callable[..., Any]:
    """
    由右至左組合單參數函數。

    最右邊的函數可以接收任意參數，因為它決定了組合後函數的簽名。
    compose(f, g, h) 等同於 lambda *args: f(g(h(*args)))。

    Args:
        *funcs: 要組合的函數。

    Returns:
        組合後的函數；沒有參數時為恆等函數，只有一個時原樣返回。
    """
    if not funcs:
        return _identity

    if len(funcs) == 1:
        return funcs[0]

    return functools.reduce(
        lambda a, b: lambda *args, **kwargs: a(b(*args, **kwargs)), funcs
    )
