"""Utility helpers for Painel de Faturas."""

from painel_faturas.utils.scheduling import (
    calculate_batch_times,
    calculate_next_daily_run,
    ensure_utc,
    parse_timestamp,
    utc_now,
)

__all__ = [
    "calculate_batch_times",
    "calculate_next_daily_run",
    "ensure_utc",
    "parse_timestamp",
    "utc_now",
]
