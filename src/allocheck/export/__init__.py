from allocheck.export.report import build_report, save_report
from allocheck.export.table_export import export_tables, write_rules_json, write_table_csv

__all__ = ["build_report", "save_report", "export_tables", "write_rules_json", "write_table_csv"]
