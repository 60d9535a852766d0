"""
CSV input and output for batch normalization.
"""

import csv
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TextIO, Union

from .batch_runner import NormalizedRecord, INPUT_COLUMN, OUTPUT_COLUMN
from ..utils.logger import get_logger
from ..utils.error_handler import ParseError, ValidationError

logger = get_logger(__name__)


@dataclass
class RowSet:
    """Parsed rows plus the header row in file order."""
    rows: List[Dict[str, Optional[str]]]
    headers: List[str]
    
    def __len__(self) -> int:
        return len(self.rows)


def parse_rows(stream: TextIO) -> RowSet:
    """
    Parse CSV text with a header row.
    
    Blank lines are skipped by the csv reader; a line holding only
    delimiters is kept as a row of empty cells.
    
    Raises:
        ParseError: If the content is not valid CSV or has no header row
    """
    try:
        reader = csv.DictReader(stream)
        headers = list(reader.fieldnames or [])
        if not headers:
            raise ParseError("CSV input has no header row")
        rows = list(reader)
    except csv.Error as e:
        raise ParseError(f"Error parsing CSV: {e}", original_exception=e)
    
    return RowSet(rows=rows, headers=headers)


def read_rows(path: Union[str, Path], encoding: str = 'utf-8-sig') -> RowSet:
    """
    Read a CSV file into a RowSet.
    
    Raises:
        ParseError: If the file is missing, undecodable or malformed
    """
    path = Path(path)
    logger.info(f"Parsing {path.name}...")
    try:
        with open(path, 'r', encoding=encoding, newline='') as csvfile:
            row_set = parse_rows(csvfile)
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"Could not read {path}: {e}", original_exception=e)
    
    logger.info(f"Parsed {len(row_set)} rows with columns {row_set.headers}")
    return row_set


def validate_selection(row_set: RowSet, column: Optional[str]):
    """
    Check that a column was chosen that exists and that there is data.
    
    Raises:
        ValidationError: If the column is unknown or there are no rows
    """
    if not column or column not in row_set.headers or not row_set.rows:
        raise ValidationError(
            f"Invalid column {column!r} or no data to process",
            user_message="Invalid column or no data to process."
        )


def write_records(records: Sequence[NormalizedRecord], stream: TextIO):
    """Write records as a two-column CSV table."""
    if not records:
        raise ValidationError(
            "No results to export",
            user_message="No results to download."
        )
    
    writer = csv.DictWriter(stream, fieldnames=[INPUT_COLUMN, OUTPUT_COLUMN])
    writer.writeheader()
    for record in records:
        row = record.to_row()
        if row[INPUT_COLUMN] is None:
            row[INPUT_COLUMN] = ''
        writer.writerow(row)


def export_records(records: Sequence[NormalizedRecord], path: Union[str, Path]) -> Path:
    """Write records to a CSV file and return its path."""
    path = Path(path)
    buffer = io.StringIO()
    write_records(records, buffer)
    
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8', newline='') as csvfile:
        csvfile.write(buffer.getvalue())
    
    logger.info(f"Exported {len(records)} rows to {path}")
    return path
