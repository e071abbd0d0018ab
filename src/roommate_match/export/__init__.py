"""Export modules."""

from roommate_match.export.csv_exporter import export_to_csv
from roommate_match.export.json_exporter import export_to_json

__all__ = ["export_to_csv", "export_to_json"]
