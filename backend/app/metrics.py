"""
In-process counters for observability. Process-local; for multi-worker use external metrics (e.g. Prometheus).
"""
import threading

# AI provider health: calls that timed out (after the internal retry) and responses that broke the contract.
provider_timeouts_total: int = 0
provider_contract_errors_total: int = 0
_lock = threading.Lock()


def increment_provider_timeouts_total() -> int:
    """Increment provider_timeouts_total; return new value. Thread-safe."""
    global provider_timeouts_total
    with _lock:
        provider_timeouts_total += 1
        return provider_timeouts_total


def increment_provider_contract_errors_total() -> int:
    """Increment provider_contract_errors_total; return new value. Thread-safe."""
    global provider_contract_errors_total
    with _lock:
        provider_contract_errors_total += 1
        return provider_contract_errors_total


def snapshot() -> dict[str, int]:
    with _lock:
        return {
            "provider_timeouts_total": provider_timeouts_total,
            "provider_contract_errors_total": provider_contract_errors_total,
        }
