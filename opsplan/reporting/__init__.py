"""
Report tables: derived scenario views as pandas DataFrames.
"""

from .report_tables import (
    build_report_tables,
    capacity_table,
    capas_table,
    decisions_table,
    exposure_table,
    issues_table,
    machine_names,
    machines_down_table,
    maintenance_table,
    risks_table,
    stock_table,
    summary_table,
)

__all__ = [
    "build_report_tables",
    "capacity_table",
    "capas_table",
    "decisions_table",
    "exposure_table",
    "issues_table",
    "machine_names",
    "machines_down_table",
    "maintenance_table",
    "risks_table",
    "stock_table",
    "summary_table",
]
