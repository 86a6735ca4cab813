"""Prometheus metrics definitions for partcopy.

All custom metrics use the ``partcopy_`` prefix for namespace isolation.
They count whole copies by outcome, individual part copies by status and
the bytes moved by successful part copies.

Until ``init_metrics()`` runs, the module-level references stay ``None`` and
the copier records nothing, so embedding applications that do not expose
Prometheus pay no registration cost.
"""

from __future__ import annotations

from prometheus_client import Counter

# Flag indicating whether metrics have been initialised via init_metrics().
_initialized: bool = False

# ---------------------------------------------------------------------------
# Copy outcome counter  (labels: outcome)
# ---------------------------------------------------------------------------
copies_total: Counter | None = None

# ---------------------------------------------------------------------------
# Part copy counter  (labels: status)
# ---------------------------------------------------------------------------
parts_total: Counter | None = None

# ---------------------------------------------------------------------------
# Byte counter
# ---------------------------------------------------------------------------
bytes_copied_total: Counter | None = None


def init_metrics() -> None:
    """Create and register all Prometheus metrics.

    Safe to call more than once; collectors are registered in the global
    registry only on the first call.
    """
    global _initialized
    global copies_total, parts_total, bytes_copied_total

    if _initialized:
        return

    copies_total = Counter(
        "partcopy_copies_total",
        "Total multipart copies by final outcome",
        ["outcome"],
    )

    parts_total = Counter(
        "partcopy_parts_total",
        "Total part copies by status",
        ["status"],
    )

    bytes_copied_total = Counter(
        "partcopy_bytes_copied_total",
        "Total bytes copied by successful part copies",
    )

    _initialized = True


def record_copy(outcome: str) -> None:
    if copies_total is not None:
        copies_total.labels(outcome=outcome).inc()


def record_part(status: str, size: int = 0) -> None:
    if parts_total is not None:
        parts_total.labels(status=status).inc()
    if size and bytes_copied_total is not None:
        bytes_copied_total.inc(size)
