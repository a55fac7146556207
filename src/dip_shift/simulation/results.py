"""
Packaging of a finished simulation pass into a SimulationResult.
"""

from typing import TYPE_CHECKING, Sequence

from dip_shift.models import DailyLogEntry, SimulationResult

if TYPE_CHECKING:
    from dip_shift.simulation.engine import SimulationState


def aggregate_result(
    state: "SimulationState",
    daily_log: Sequence[DailyLogEntry],
    num_records: int,
) -> SimulationResult:
    """
    Freeze the terminal state and daily log into a SimulationResult.

    Args:
        state: Terminal running state (full precision)
        daily_log: One entry per simulated day, anchor day excluded
        num_records: Length of the simulated record sequence

    Returns:
        Immutable SimulationResult

    Raises:
        ValueError: If the log does not hold exactly num_records - 1 entries
    """
    if len(daily_log) != num_records - 1:
        raise ValueError(
            f"Daily log has {len(daily_log)} entries, expected {num_records - 1}"
        )

    return SimulationResult(
        final_benchmark_value=state.benchmark_value,
        final_leveraged_value=state.leveraged_value,
        final_total=state.benchmark_value + state.leveraged_value,
        daily_log=tuple(daily_log),
    )
