"""
Entity column detection.
Picks the column whose values name the organization or person each row describes.
"""

import logging
from typing import Sequence

from .models import Row, table_columns

ENTITY_COLUMN_KEYWORDS = ('name', 'company', 'incubator', 'organization')


class EntityColumnResolver:
    """Chooses the lookup column of a table by keyword heuristics.

    The first column whose lowercased name contains one of the keywords wins;
    without a match the first column is used. Schemas with several name-like
    columns (e.g. ``contact_name`` before ``company``) can pick the wrong one.
    """

    def __init__(self, keywords: Sequence[str] = ENTITY_COLUMN_KEYWORDS):
        self.keywords = tuple(keyword.lower() for keyword in keywords)
        self.logger = logging.getLogger(__name__)

    def resolve(self, table: Sequence[Row]) -> str:
        """Return the entity column name, or '' for an empty table."""
        columns = table_columns(table)
        if not columns:
            return ''

        for column in columns:
            lowered = column.lower()
            if any(keyword in lowered for keyword in self.keywords):
                self.logger.debug(f"Resolved entity column: {column}")
                return column

        self.logger.debug(f"No name-like column found, falling back to: {columns[0]}")
        return columns[0]

    @staticmethod
    def entity_name(row: Row, column: str) -> str:
        """Stripped entity name of a row, '' when blank or missing."""
        value = row.get(column)
        if value is None:
            return ''
        return str(value).strip()
