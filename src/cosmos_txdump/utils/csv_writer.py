"""CSV output writer for translated and raw transaction records."""

import os
import csv
from datetime import datetime
from typing import Dict, List, Optional, Sequence
import logging

from ..models.core import ComprehensiveTransaction, FetcherConfig, IndividualMessageTransaction
from ..models.wire import RawPage


logger = logging.getLogger(__name__)


def records_to_rows(records: Sequence) -> List[Dict[str, str]]:
    """Flatten records to CSV rows; raw pages expand to one row per transaction"""
    rows: List[Dict[str, str]] = []
    for record in records:
        if isinstance(record, RawPage):
            rows.extend(record.to_rows())
        else:
            rows.append(record.to_row())
    return rows


class CSVWriter:
    """Handles CSV output with one row per record"""

    COMPREHENSIVE_HEADERS = [
        'height', 'txhash', 'code', 'gas_used', 'gas_wanted', 'timestamp',
        'memo', 'timeout_height', 'signatures', 'data', 'messages',
    ]

    INDIVIDUAL_HEADERS = [
        'height', 'txhash', 'message_index', 'message_type', 'gas_used', 'gas_wanted',
        'timestamp', 'memo', 'timeout_height', 'signatures', 'code', 'message',
    ]

    RAW_HEADERS = [
        'height', 'txhash', 'code', 'gas_used', 'gas_wanted', 'timestamp',
        'memo', 'message_count',
    ]

    def __init__(self, config: FetcherConfig):
        self.config = config

    def headers_for(self, records: Sequence) -> List[str]:
        if not records:
            return []
        first = records[0]
        if isinstance(first, IndividualMessageTransaction):
            return self.INDIVIDUAL_HEADERS
        if isinstance(first, ComprehensiveTransaction):
            return self.COMPREHENSIVE_HEADERS
        if isinstance(first, RawPage):
            return self.RAW_HEADERS
        return list(first.to_row().keys())

    def write_records(self, records: Sequence, output_path: str) -> bool:
        """
        Write records to a CSV file

        Args:
            records: Translated records or raw pages
            output_path: Path where CSV file should be written

        Returns:
            True if successful, False otherwise
        """
        try:
            directory = os.path.dirname(output_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            with open(output_path, 'w', newline='', encoding='utf-8') as csvfile:
                writer = csv.DictWriter(csvfile, fieldnames=self.headers_for(records))
                writer.writeheader()
                for row in records_to_rows(records):
                    writer.writerow(row)

            logger.info(f"Wrote {len(records)} records to {output_path}")
            return True

        except (OSError, csv.Error) as e:
            logger.error(f"Failed to write {output_path}: {e}")
            return False

    def generate_output_path(self, kind: str, start: int, end: Optional[int] = None) -> str:
        """
        Build the dump file name for a height or a height range

        Args:
            kind: "tx" for bundled transactions, "msg" for individual messages
            start: Queried height, or first height of the range
            end: Last height of the range, if any

        Returns:
            Output file path inside the configured output directory
        """
        if end is None or end == start:
            filename = f"{kind}_dump_at_{start}.csv"
        elif kind == 'msg':
            filename = f"msg_dump_from_{start}_to_{end}.csv"
        else:
            filename = f"{kind}_dump_at_{start}_to_{end}.csv"
        return os.path.join(self.config.output_directory, filename)

    def create_unique_filename(self, base_path: str) -> str:
        """
        Create unique filename if file already exists

        Args:
            base_path: Base file path

        Returns:
            Unique file path (may have suffix added)
        """
        if not os.path.exists(base_path):
            return base_path

        path_without_ext, ext = os.path.splitext(base_path)

        counter = 1
        while counter <= 999:
            new_path = f"{path_without_ext}_{counter:03d}{ext}"
            if not os.path.exists(new_path):
                return new_path
            counter += 1

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{path_without_ext}_{timestamp}{ext}"
