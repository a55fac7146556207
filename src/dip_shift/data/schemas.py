"""
Data schemas for price file validation.

Defines expected columns for price input files and the daily log output.
Column names are matched case-insensitively and may use any listed alias.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ColumnSchema:
    """Schema definition for a single column."""
    name: str
    dtype: str  # pandas dtype string
    required: bool = True
    aliases: list[str] = field(default_factory=list)

    def resolve(self, df_columns: list[str]) -> Optional[str]:
        """
        Find the dataframe column matching this schema column.

        Args:
            df_columns: List of column names from the dataframe

        Returns:
            The matching column name as it appears in the dataframe, or None
        """
        by_lower = {str(c).strip().lower(): c for c in df_columns}
        for candidate in [self.name, *self.aliases]:
            if candidate.lower() in by_lower:
                return by_lower[candidate.lower()]
        return None


@dataclass
class FileSchema:
    """Schema definition for a file."""
    name: str
    columns: list[ColumnSchema]
    description: str

    def resolve_columns(self, df_columns: list[str]) -> tuple[dict[str, str], list[str]]:
        """
        Map schema column names to dataframe column names.

        Args:
            df_columns: List of column names from the dataframe

        Returns:
            Tuple of (schema name -> dataframe column, list of missing required columns)
        """
        mapping = {}
        missing = []
        for column in self.columns:
            resolved = column.resolve(df_columns)
            if resolved is not None:
                mapping[column.name] = resolved
            elif column.required:
                missing.append(column.name)
        return mapping, missing

    def validate_columns(self, df_columns: list[str]) -> tuple[bool, list[str]]:
        """
        Validate that a dataframe has the required columns.

        Args:
            df_columns: List of column names from the dataframe

        Returns:
            Tuple of (is_valid, list of missing columns)
        """
        _, missing = self.resolve_columns(df_columns)
        return len(missing) == 0, missing


# Daily Price Series Schema (one instrument per file)
PRICE_SERIES_SCHEMA = FileSchema(
    name="price_series",
    description="Daily closing prices of a single instrument",
    columns=[
        ColumnSchema(name="date", dtype="datetime64[ns]", aliases=["timestamp"]),
        ColumnSchema(
            name="close",
            dtype="float64",
            aliases=["adj close", "adj_close", "adjusted_close", "price"],
        ),
    ],
)

# Daily Log Output Schema
DAILY_LOG_SCHEMA = FileSchema(
    name="daily_log",
    description="Day-by-day portfolio values of a simulation run",
    columns=[
        ColumnSchema(name="date", dtype="datetime64[ns]"),
        ColumnSchema(name="benchmark_value", dtype="float64"),
        ColumnSchema(name="leveraged_value", dtype="float64"),
        ColumnSchema(name="total", dtype="float64"),
        ColumnSchema(name="shift_amount", dtype="float64"),
        ColumnSchema(name="contribution", dtype="float64"),
    ],
)
