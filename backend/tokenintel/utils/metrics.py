from prometheus_client import Counter, Histogram
import time
from functools import wraps

# Fallback metrics
strategy_attempts = Counter(
    'tokenintel_strategy_attempts_total',
    'Total number of fallback strategy attempts',
    ['strategy']
)

strategy_failures = Counter(
    'tokenintel_strategy_failures_total',
    'Total number of fallback strategy failures',
    ['strategy', 'reason']
)

# RPC metrics
rpc_connect_attempts = Counter(
    'tokenintel_rpc_connect_attempts_total',
    'RPC endpoint liveness probes',
    ['outcome']
)

# Research metrics
research_steps = Counter(
    'tokenintel_research_steps_total',
    'Research step outcomes',
    ['step', 'status']
)

research_duration = Histogram(
    'tokenintel_research_duration_seconds',
    'Research workflow duration',
    ['finish_reason']
)

upstream_duration = Histogram(
    'tokenintel_upstream_request_duration_seconds',
    'Upstream REST request duration',
    ['upstream']
)


def track_upstream(upstream):
    """Decorator to time calls to an upstream REST service"""
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return await func(*args, **kwargs)
            finally:
                upstream_duration.labels(upstream=upstream).observe(
                    time.time() - start_time
                )
        return wrapper
    return decorator
