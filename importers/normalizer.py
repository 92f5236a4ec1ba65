# =============================================================================
# importers/normalizer.py
# =============================================================================
# PURPOSE:
#   Cleans a payments export WITHOUT touching the database and writes the
#   result as a new CSV under OUTPUT_DIR.
#
# WHAT "CLEAN" MEANS:
#   - Column names resolved to ours (same aliases as the live import)
#   - Billing periods as full dates, amounts as numbers
#   - Status / type mapped to our vocabulary
#   - ONE row per transaction id; when an id repeats, the LAST row wins
#
# DEDUPLICATION vs. LIVE IMPORT:
#   The live import never deduplicates; the database conflict rules do that
#   job. Deduplication only happens here.
# =============================================================================

import os
from datetime import datetime

import pandas as pd

from .errors import ImportValidationError
from .field_resolver import IMPORT_ALIASES, resolve_fields
from .row_parser import iter_csv_rows
from .transaction_importer import split_record


# Column order of the cleaned file
EXPORT_COLUMNS = [
    "transaction_id",
    "transaction_date",
    "amount",
    "status",
    "type",
    "platform",
    "identification_number",
    "name",
    "address",
    "phone",
    "email",
    "invoice_number",
    "billing_period",
    "invoiced_amount",
    "paid_amount",
]


def deduplicate(records, key):
    """
    Keep one record per key value; the last one seen wins.

    PARAMETERS:
        records (iterable): dicts that all carry `key`
        key (str): name of the natural-key field

    RETURNS:
        list: one record per key, in the order each key was FIRST seen

    EXAMPLE:
        deduplicate([{"id": "a", "v": 1}, {"id": "b", "v": 2}, {"id": "a", "v": 3}], "id")
        → [{"id": "a", "v": 3}, {"id": "b", "v": 2}]
    """
    by_key = {}
    for record in records:
        # Re-assigning an existing key keeps its original position
        by_key[record[key]] = record
    return list(by_key.values())


class Normalizer:
    """
    Normalizes a payments CSV into OUTPUT_DIR.

    USAGE:
        normalizer = Normalizer("output")
        result = normalizer.normalize_file("/tmp/upload.csv")
        # {"message": ..., "records": 3, "filename": "normalized_2024..._.csv"}
    """

    def __init__(self, output_dir):
        self.output_dir = output_dir
        self.skipped = []

    def normalize_file(self, path):
        """
        Read, clean, deduplicate and write one file.

        RETURNS:
            dict: message, records (rows written), filename (inside output_dir)

        RAISES:
            ImportValidationError: no row had a transaction id
        """
        records = deduplicate(self._normalize_rows(iter_csv_rows(path)), "transaction_id")

        if not records:
            raise ImportValidationError("The file is empty or contains no valid data.")

        filename = self.write_records(records)

        print(f"[OK] Normalized {len(records)} records into {filename} ({len(self.skipped)} skipped)")

        return {
            "message": f"{len(records)} records normalized.",
            "records": len(records),
            "filename": filename,
        }

    def _normalize_rows(self, rows):
        for row_num, row in enumerate(rows, start=2):
            record, reason = resolve_fields(row, IMPORT_ALIASES, required=["transaction_id"])
            if record is None:
                self.skipped.append(f"Row {row_num}: {reason}")
                continue

            customer, invoice, transaction = split_record(record)
            yield {**transaction, **customer, **invoice}

    def write_records(self, records):
        """Write records as CSV into output_dir; returns the file name."""
        os.makedirs(self.output_dir, exist_ok=True)

        filename = f"normalized_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}.csv"
        df = pd.DataFrame(records, columns=EXPORT_COLUMNS)
        df.to_csv(os.path.join(self.output_dir, filename), index=False)

        return filename
