import json
import logging

from counter_store import store, performance
from counter_actions import increment, increment_by, decrement, reset, set_label

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    # 訂閱計數變化，只在數值改變時收到通知
    store.observable().select(lambda state: state["counter"].count).subscribe(
        on_next=lambda count: print(f"計數變化: {count}")
    )

    unsubscribe = store.subscribe(lambda: print(f"標籤: {store.state['label']!r}"))

    # 分發actions
    print("\n==== 開始測試基本操作 ====")
    store.dispatch(increment())
    store.dispatch(increment_by(5))
    store.dispatch(decrement())
    store.dispatch(set_label("demo"))
    store.dispatch(reset(10))
    unsubscribe()
    store.dispatch(increment_by(99))

    # 打印最終狀態
    print("\n==== 最終狀態 ====")
    print(store.state)
    print(json.dumps(performance.get_metrics(), indent=2))
