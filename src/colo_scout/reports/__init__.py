"""Reports module - Result ordering, tables and CSV export."""

from colo_scout.reports.export import export_csv, render_table, sort_outcomes

__all__ = [
    "export_csv",
    "render_table",
    "sort_outcomes",
]
