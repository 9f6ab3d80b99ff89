from pyredux import LoggerMiddleware, PerformanceMonitorMiddleware, apply_middleware, create_store
from counter_reducers import root_reducer

performance = PerformanceMonitorMiddleware(threshold_ms=5)

# 創建Store，並套用中介軟體
store = create_store(
    root_reducer,
    apply_middleware(LoggerMiddleware, performance),
)
