"""
Append-only run logging for the dip-shift simulator.

Each step of a run (configuration, loading, matching, filtering,
simulation) is logged with a timestamp and its key figures to support
auditability and reproducibility.
"""

import json
from datetime import datetime, date
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from dip_shift.models import (
    ActionType,
    MatchedRecord,
    RunLogEntry,
    SimulationConfig,
    SimulationResult,
)


class RunLogger:
    """
    Append-only run logger.

    Writes all run steps to a JSONL file for audit purposes.
    Each line is a complete JSON object representing one action.
    """

    def __init__(self, log_path: str | Path):
        """
        Initialize the run logger.

        Args:
            log_path: Path to the log file (will be created if not exists)
        """
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, entry: RunLogEntry) -> None:
        """
        Write a run log entry.

        Args:
            entry: RunLogEntry to write
        """
        record = {
            "timestamp": entry.timestamp.isoformat(),
            "action_type": entry.action_type.value,
            "run_id": entry.run_id,
            "details": entry.details,
        }

        with open(self.log_path, "a") as f:
            f.write(json.dumps(record, cls=DecimalEncoder) + "\n")

    def _log_action(self, action_type: ActionType, run_id: str, details: dict) -> None:
        self.log(RunLogEntry.create(action_type=action_type, run_id=run_id, details=details))

    def log_config_loaded(
        self,
        run_id: str,
        config: SimulationConfig,
        config_path: Optional[str] = None,
    ) -> None:
        """
        Log the configuration a run uses.

        Args:
            run_id: Run identifier
            config: Validated configuration
            config_path: Path to configuration file, if one was used
        """
        details = {
            "config_path": config_path,
            "initial_capital": config.initial_capital,
            "monthly_contribution": config.monthly_contribution,
            "dip_multiplier": config.dip_multiplier,
            "start_date": config.start_date,
            "end_date": config.end_date,
        }
        self._log_action(ActionType.CONFIG_LOADED, run_id, details)

    def log_series_loaded(
        self,
        run_id: str,
        symbol: str,
        num_records: int,
        source: Optional[str] = None,
    ) -> None:
        """Log that one price series was loaded."""
        details = {
            "symbol": symbol,
            "num_records": num_records,
            "source": source,
        }
        self._log_action(ActionType.SERIES_LOADED, run_id, details)

    def log_series_matched(
        self,
        run_id: str,
        matched: tuple[MatchedRecord, ...],
        benchmark_dropped: int,
        leveraged_dropped: int,
    ) -> None:
        """
        Log the outcome of date matching.

        Args:
            run_id: Run identifier
            matched: Matched records
            benchmark_dropped: Benchmark dates without a leveraged counterpart
            leveraged_dropped: Leveraged dates without a benchmark counterpart
        """
        details = {
            "matched_count": len(matched),
            "first_date": matched[0].date if matched else None,
            "last_date": matched[-1].date if matched else None,
            "benchmark_dropped": benchmark_dropped,
            "leveraged_dropped": leveraged_dropped,
        }
        self._log_action(ActionType.SERIES_MATCHED, run_id, details)

    def log_range_filtered(
        self,
        run_id: str,
        records: tuple[MatchedRecord, ...],
        start_date: Optional[date],
        end_date: Optional[date],
    ) -> None:
        """Log the outcome of date window filtering."""
        details = {
            "start_date": start_date,
            "end_date": end_date,
            "record_count": len(records),
            "first_date": records[0].date if records else None,
            "last_date": records[-1].date if records else None,
        }
        self._log_action(ActionType.RANGE_FILTERED, run_id, details)

    def log_simulation_completed(
        self,
        run_id: str,
        result: SimulationResult,
    ) -> None:
        """
        Log a finished simulation.

        Args:
            run_id: Run identifier
            result: Simulation result
        """
        details = {
            "days_simulated": len(result.daily_log),
            "final_benchmark_value": result.final_benchmark_value,
            "final_leveraged_value": result.final_leveraged_value,
            "final_total": result.final_total,
            "dip_days": sum(1 for e in result.daily_log if e.shift_amount > 0),
            "contributions": sum(1 for e in result.daily_log if e.contribution > 0),
        }
        self._log_action(ActionType.SIMULATION_COMPLETED, run_id, details)

    def read_log(self) -> list[RunLogEntry]:
        """
        Read all entries from the log file.

        Returns:
            List of RunLogEntry objects
        """
        if not self.log_path.exists():
            return []

        entries = []
        with open(self.log_path, "r") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                record = json.loads(line)
                entries.append(
                    RunLogEntry(
                        timestamp=datetime.fromisoformat(record["timestamp"]),
                        action_type=ActionType(record["action_type"]),
                        run_id=record.get("run_id"),
                        details=record.get("details", {}),
                    )
                )

        return entries

    def filter_by_run(self, run_id: str) -> list[RunLogEntry]:
        """
        Get log entries for a specific run.

        Args:
            run_id: Run to filter by

        Returns:
            Filtered list of entries
        """
        return [e for e in self.read_log() if e.run_id == run_id]

    def filter_by_action_type(self, action_type: ActionType) -> list[RunLogEntry]:
        """
        Get log entries of a specific action type.

        Args:
            action_type: Action type to filter by

        Returns:
            Filtered list of entries
        """
        return [e for e in self.read_log() if e.action_type == action_type]


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal and date types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, (date, datetime)):
            return obj.isoformat()
        return super().default(obj)
