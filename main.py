#!/usr/bin/env python3
"""
Command-line entry point for the Firm Normalizer.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from firm_normalizer.config import Config
from firm_normalizer.services import (
    NormalizerService, read_rows, validate_selection, export_records, group, summarize_groups
)
from firm_normalizer.utils.logger import setup_logging, get_logger
from firm_normalizer.utils.error_handler import (
    ErrorHandler, ErrorContext
)

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="firm-normalizer",
        description="Standardize firm names in a CSV column against a knowledge base"
    )
    parser.add_argument("input", type=Path, help="CSV file with a header row")
    parser.add_argument("--column", help="Column holding the firm names")
    parser.add_argument("--kb", dest="knowledge_base", help="Knowledge base path or URL")
    parser.add_argument("--output", type=Path, help="Where to write the normalized CSV")
    parser.add_argument("--config", type=Path, help="Path to config.json")
    parser.add_argument("--log-level", help="Python logging level")
    parser.add_argument("--list-columns", action="store_true", help="Print the CSV columns and exit")
    return parser


def print_groups(records, max_variants: int):
    """Print the grouped results, capping each group's variant list."""
    for summary in summarize_groups(group(records), max_variants=max_variants):
        print(f"{summary.label} ({summary.total} variants found)")
        for variant in summary.variants:
            print(f"  - {variant if variant is not None else ''}")
        if summary.omitted:
            print(f"  ...and {summary.omitted} more.")


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)
    error_handler = ErrorHandler(logger)
    
    try:
        config = Config(args.config)
        setup_logging(
            log_level=args.log_level or config.get('logging.level', 'INFO'),
            log_dir=config.get('logging.log_dir')
        )
        
        row_set = read_rows(args.input)
        if args.list_columns:
            for header in row_set.headers:
                print(header)
            return 0
        validate_selection(row_set, args.column)
        
        service = NormalizerService(config)
        logger.info("Loading knowledge base...")
        service.load(args.knowledge_base)
        
        def report(processed: int, total: int):
            logger.info(f"Processing... {processed} of {total} rows completed.")
        
        records = service.run(row_set.rows, args.column, progress_callback=report)
        logger.info(f"Normalization complete! {len(records)} rows processed.")
        
        print_groups(records, config.get('display.max_variants', 100))
        
        output = args.output or Path(config.get('export.filename', 'normalized_firms.csv'))
        export_records(records, output)
    except Exception as e:
        handled = error_handler.handle_error(e, ErrorContext(operation="main", component="cli"))
        print(f"Error: {handled.user_message} ({handled.message})", file=sys.stderr)
        return 1
    
    return 0


if __name__ == "__main__":
    sys.exit(main())
