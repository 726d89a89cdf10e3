from infrastructure.resilience.retry import retry_with_backoff, RetryConfig

__all__ = [
    "retry_with_backoff",
    "RetryConfig",
]
