"""UI layer -- Rich console output and live progress."""

from .dashboard import (
    ProgressDisplay,
    console,
    print_final_results,
    print_header,
    print_latency,
    print_server,
    print_speed_result,
)

__all__ = [
    "ProgressDisplay",
    "console",
    "print_final_results",
    "print_header",
    "print_latency",
    "print_server",
    "print_speed_result",
]
