"""
CSV input and output for tables.
"""

import csv
from typing import List, Sequence

from .enrichment.models import Row, Table


def read_table(input_file: str) -> Table:
    """Read a CSV file with a header row into a list of string rows."""
    with open(input_file, 'r', newline='', encoding='utf-8-sig') as csvfile:
        reader = csv.DictReader(csvfile)
        table = []
        for record in reader:
            # Short rows leave None values; surplus cells land under the None key
            row = {key: (value or '') for key, value in record.items() if key is not None}
            table.append(row)
    return table


def output_columns(table: Sequence[Row]) -> List[str]:
    """Union of column names in first-seen order."""
    columns: List[str] = []
    seen = set()
    for row in table:
        for key in row:
            if key not in seen:
                seen.add(key)
                columns.append(key)
    return columns


def write_table(table: Sequence[Row], output_file: str):
    """Write rows to CSV; columns missing from a row are left empty."""
    with open(output_file, 'w', newline='', encoding='utf-8') as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=output_columns(table), restval='')
        writer.writeheader()
        for row in table:
            writer.writerow(row)
