"""Monitoring module for binpack3d.

Provides trace sinks, metrics tracking and Telegram notifications for
packing runs.
"""

from .metrics import (
    BinMetrics,
    RunMetrics,
    export_to_csv,
    export_to_json,
    print_summary,
)
from .telegram_notifier import (
    format_bin_summary,
    format_final_summary,
    format_run_start,
    send_telegram,
)
from .trace import NullTracer, StepTracer, Tracer

__all__ = [
    # Tracing
    "Tracer",
    "NullTracer",
    "StepTracer",
    # Metrics
    "BinMetrics",
    "RunMetrics",
    "export_to_csv",
    "export_to_json",
    "print_summary",
    # Telegram
    "send_telegram",
    "format_run_start",
    "format_bin_summary",
    "format_final_summary",
]
