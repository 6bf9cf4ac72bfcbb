"""Utility helpers for runners and post-processing."""

from .run_info import print_integral_summary, print_run_header

__all__ = [
    "print_integral_summary",
    "print_run_header",
]
