"""
Run logging module for the dip-shift simulator.

Provides append-only JSONL logging of run steps for audit and reproducibility.
"""

from dip_shift.logging.run_log import (
    DecimalEncoder,
    RunLogger,
)

__all__ = [
    "DecimalEncoder",
    "RunLogger",
]
