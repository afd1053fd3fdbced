"""
csv_data.py
~~~~~~~~~~~

Loading and reshaping tabular data from CSV files.

:class:`CsvDataHandler` reads a CSV file into rows of strings, keeps track
of the column names, and offers the column operations needed to turn a
dataset into model inputs and targets.
"""

import csv
import logging
import os
from typing import Any, List, Optional, Sequence

import numpy as np

from .normalizer import MinMaxScaler

# Configure module logger
logger = logging.getLogger(__name__)

Rows = List[List[Any]]


class CsvDataHandler:
    """
    Reads a CSV dataset and manipulates its columns.

    The first row of the file is treated as the header. Operations that
    remove columns keep ``column_names`` in step with the data.

    Example:
        >>> handler = CsvDataHandler()
        >>> rows = handler.read_csv('iris.csv')
        >>> labels = handler.extract_column('species', rows)
        >>> features = handler.rows_to_float(rows)
    """

    FILE_EXTENSION = '.csv'

    def __init__(self):
        self.file_name = ''
        self.column_names: List[str] = []
        self.data: Rows = []

    def read_csv(self, filename: str) -> Rows:
        """
        Read a CSV file.

        Blank lines are skipped and every cell is stripped of surrounding
        whitespace.

        Args:
            filename: Path to a ``.csv`` file

        Returns:
            list: Data rows (header excluded) as lists of strings

        Raises:
            ValueError: If no file is given or the extension is not ``.csv``
            FileNotFoundError: If the file does not exist
        """
        if not filename:
            raise ValueError("No file provided.")

        extension = os.path.splitext(filename)[1]
        if extension != self.FILE_EXTENSION:
            raise ValueError(
                f"Unsupported file extension '{extension}'. "
                f"Only accepts '{self.FILE_EXTENSION}' format."
            )

        with open(filename, newline='', encoding='utf-8') as f:
            rows = [
                [cell.strip() for cell in row]
                for row in csv.reader(f)
                if any(cell.strip() for cell in row)
            ]

        self.file_name = filename
        if not rows:
            self.column_names = []
            self.data = []
        else:
            self.column_names = rows[0]
            self.data = rows[1:]

        logger.info(
            f"Read {len(self.data)} row(s) and {len(self.column_names)} "
            f"column(s) from '{filename}'"
        )
        return self.data

    @staticmethod
    def rows_to_float(data: Rows) -> np.ndarray:
        """
        Convert rows of numeric strings to a float array.

        Raises:
            ValueError: If a cell is not numeric
        """
        if data is None:
            raise ValueError("No data is passed.")
        return np.array(
            [[float(cell) for cell in row] for row in data], dtype=float
        )

    @staticmethod
    def get_row_elements(count: int, data: Rows) -> Rows:
        """Keep the first ``count`` cells of every row."""
        if not isinstance(count, int) or count < 0 or data is None:
            raise ValueError(f"Invalid count: {count!r}")
        return [list(row[:count]) for row in data]

    def _column_index(self, name: str) -> int:
        try:
            return self.column_names.index(name)
        except ValueError:
            raise KeyError(f"Column '{name}' not found.") from None

    def remove_columns(self, fields: Sequence[str], data: Rows) -> Rows:
        """
        Drop columns by name.

        Args:
            fields: Column names to remove
            data: Rows to remove them from (not modified)

        Returns:
            list: New rows without the removed columns

        Raises:
            ValueError: If ``fields`` is empty
            KeyError: If a column does not exist
        """
        if not fields or data is None:
            raise ValueError(f"Invalid fields: {fields!r}")

        drop = {self._column_index(field) for field in fields}
        self.column_names = [
            name for i, name in enumerate(self.column_names) if i not in drop
        ]
        return [
            [cell for i, cell in enumerate(row) if i not in drop]
            for row in data
        ]

    def extract_column(self, column_name: str, data: Rows) -> Rows:
        """
        Remove a column from the rows and return its values.

        The rows in ``data`` are modified in place.

        Returns:
            list: One single-element row per sample, e.g. ``[['setosa'], ...]``

        Raises:
            KeyError: If the column does not exist
        """
        if not column_name or data is None:
            raise ValueError(f"Invalid column name: {column_name!r}")

        index = self._column_index(column_name)
        del self.column_names[index]
        return [[row.pop(index)] for row in data]

    @staticmethod
    def normalize(method: str, data) -> np.ndarray:
        """
        Normalize numeric data.

        Args:
            method: Only ``"minmax"`` is supported
            data: Numeric rows

        Raises:
            ValueError: For an unknown method or empty data
        """
        if not method or data is None or len(data) == 0:
            raise ValueError("No method nor data is provided.")
        if method.lower() != 'minmax':
            raise ValueError(f"Unsupported normalization '{method}'")
        return MinMaxScaler().fit_transform(data)

    @staticmethod
    def trim_rows(count: int, data: Rows) -> Rows:
        return list(data[:count])

    def tabularize(self, data: Rows) -> str:
        """Render rows as an aligned text table under the column names."""
        if data is None or len(data) == 0:
            raise ValueError("No data is provided.")

        widths = [len(name) for name in self.column_names]
        for row in data:
            for i, cell in enumerate(row):
                if i < len(widths):
                    widths[i] = max(widths[i], len(str(cell)))
                else:
                    widths.append(len(str(cell)))

        def render(cells) -> str:
            return ''.join(
                str(cell).ljust(widths[i] + 4) for i, cell in enumerate(cells)
            ).rstrip()

        header = render(self.column_names)
        lines = [header, '-' * len(header)]
        lines.extend(render(row) for row in data)
        return '\n'.join(lines)

    def export_csv(
        self,
        filename: str,
        data: Rows,
        column_names: Optional[Sequence[str]] = None
    ) -> str:
        """
        Write rows to a CSV file with the current column names as header.

        A ``.csv`` extension is appended when missing.

        Returns:
            str: Path of the written file
        """
        if not filename.endswith(self.FILE_EXTENSION):
            filename += self.FILE_EXTENSION
        header = list(column_names or self.column_names)

        with open(filename, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(header)
            writer.writerows(data)

        logger.info(f"Exported {len(data)} row(s) to '{filename}'")
        return filename
