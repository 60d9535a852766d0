"""
Batch processing of rows through the Standardizer, plus grouping of the
results for display.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import unicodedata
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .knowledge_base import UNKNOWN
from .standardizer import Standardizer
from ..utils.logger import get_logger, get_audit_logger, log_performance

logger = get_logger(__name__)
audit_logger = get_audit_logger()

INPUT_COLUMN = 'Input Firm Name'
OUTPUT_COLUMN = 'Standardized Firm Name'

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class NormalizedRecord:
    """One processed row: the raw input and the label it mapped to."""
    input_name: Any
    standardized_name: str
    
    def to_row(self) -> Dict[str, Any]:
        return {
            INPUT_COLUMN: self.input_name,
            OUTPUT_COLUMN: self.standardized_name,
        }


@dataclass(frozen=True)
class GroupSummary:
    """Display view of one group, capped to a number of variants."""
    label: str
    variants: List[Any]
    total: int
    omitted: int


class BatchRunner:
    """
    Applies a Standardizer to every row of a batch.
    
    Rows are processed in fixed-size chunks and a progress callback is
    invoked after each chunk with (processed, total). With max_workers > 1
    chunks are spread over a thread pool; results always come back in
    input order.
    """
    
    def __init__(self,
                 standardizer: Standardizer,
                 chunk_size: int = 1000,
                 max_workers: int = 1,
                 progress_callback: Optional[ProgressCallback] = None):
        if chunk_size < 1:
            raise ValueError("Chunk size must be at least 1")
        if max_workers < 1:
            raise ValueError("Max workers must be at least 1")
        self.standardizer = standardizer
        self.chunk_size = chunk_size
        self.max_workers = max_workers
        self.progress_callback = progress_callback
    
    def _process_chunk(self, names: Sequence[Any]) -> List[NormalizedRecord]:
        return [
            NormalizedRecord(input_name=name, standardized_name=self.standardizer.standardize(name))
            for name in names
        ]
    
    def _report(self, processed: int, total: int):
        logger.debug(f"Processing... {processed} of {total} rows completed.")
        if self.progress_callback:
            self.progress_callback(processed, total)
    
    def standardize_names(self, names: Sequence[Any]) -> List[NormalizedRecord]:
        """Standardize a sequence of raw names, preserving order."""
        total = len(names)
        chunks = [names[start:start + self.chunk_size] for start in range(0, total, self.chunk_size)]
        
        records: List[NormalizedRecord] = []
        if self.max_workers == 1 or len(chunks) <= 1:
            for chunk in chunks:
                records.extend(self._process_chunk(chunk))
                self._report(len(records), total)
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                for chunk_records in executor.map(self._process_chunk, chunks):
                    records.extend(chunk_records)
                    self._report(len(records), total)
        
        return records
    
    @log_performance(logger, "batch normalization")
    def run(self, rows: Sequence[Mapping[str, Any]], column: str) -> List[NormalizedRecord]:
        """
        Standardize the selected column of every row.
        
        Args:
            rows: Row mappings from column name to raw value
            column: Column holding the firm names
            
        Returns:
            One NormalizedRecord per row, in row order
        """
        names = [row.get(column) for row in rows]
        records = self.standardize_names(names)
        
        unknown = sum(1 for record in records if record.standardized_name == UNKNOWN)
        audit_logger.info(
            f"Normalized {len(records)} rows from column '{column}' "
            f"({unknown} UNKNOWN)"
        )
        return records


def _label_sort_key(label: str) -> Tuple[bool, str, str, str]:
    # accents and case are ignored first; lower-case sorts before
    # upper-case when two labels differ only in case
    decomposed = unicodedata.normalize('NFKD', label)
    folded = ''.join(char for char in decomposed if not unicodedata.combining(char)).casefold()
    return (label == UNKNOWN, folded, label.swapcase(), label)


def group(records: Sequence[NormalizedRecord]) -> Dict[str, List[Any]]:
    """
    Group raw names by standard label.
    
    Each group keeps first-seen order and drops exact duplicates. Labels are
    ordered alphabetically ignoring case and accents, with UNKNOWN always last.
    """
    grouped: Dict[str, Dict[Any, None]] = {}
    for record in records:
        variants = grouped.setdefault(record.standardized_name, {})
        variants.setdefault(record.input_name, None)
    
    ordered = sorted(grouped, key=_label_sort_key)
    return {label: list(grouped[label]) for label in ordered}


def summarize_groups(groups: Mapping[str, Sequence[Any]], max_variants: int = 100) -> List[GroupSummary]:
    """Cap each group's variant list for display, reporting how many were left out."""
    if max_variants < 0:
        raise ValueError("max_variants must not be negative")
    
    summaries = []
    for label, variants in groups.items():
        total = len(variants)
        shown = list(variants[:max_variants])
        summaries.append(GroupSummary(label=label, variants=shown, total=total, omitted=total - len(shown)))
    return summaries
