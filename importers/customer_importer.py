# =============================================================================
# importers/customer_importer.py
# =============================================================================
# PURPOSE:
#   The "legacy" bulk upload: a file of customers only.
#
# ACCEPTED FILES:
#   CSV with a header, any of the column names in CUSTOMER_ALIASES:
#       nombre,numero_identificacion,direccion,telefono,correo
#       Ana Pérez,1001,Calle 1,3001234567,ana@mail.com
#
#   TXT, one identification number per line:
#       1001
#       1002
#
# WHAT THIS IMPORTER DOES:
#   1. Reads the rows (streaming for CSV)
#   2. Resolves each row to a customer record
#   3. DROPS rows without an identification number, or whose identification
#      number is not purely digits (counted in `skipped`, not reported one
#      by one to the caller)
#   4. Writes all surviving records in ONE parameterized batch
# =============================================================================

from datetime import datetime

from .errors import ImportValidationError
from .field_resolver import CUSTOMER_ALIASES, is_numeric_identifier, resolve_fields
from .row_parser import iter_csv_rows, iter_text_lines


class CustomerImporter:
    """
    Imports a CSV/TXT file of customers.

    USAGE:
        importer = CustomerImporter(gateway, "/tmp/upload.csv", ".csv")
        result = importer.import_customers()
        # {"message": "2 customers created", "customers": 2, "skipped": 1}

    ATTRIBUTES:
        batch_id: Identifier of this import run (for the logs)
        skipped: Rows that were dropped, with the reason
    """

    def __init__(self, gateway, path, extension):
        self.gateway = gateway
        self.path = path
        self.extension = extension.lower()
        self.batch_id = datetime.now().strftime("batch_%Y%m%d_%H%M%S")
        self.skipped = []

    def import_customers(self):
        """
        Parse the file and write the valid customers.

        RETURNS:
            dict: message, customers (rows written), skipped (rows dropped)

        RAISES:
            ImportValidationError: unsupported format, or no valid row at all
            sqlite3.Error / OSError: storage or read failure
        """
        records = self._parse_rows(self._read_rows())

        print(f"[INFO] {self.batch_id}: {len(records)} valid customers, {len(self.skipped)} skipped")

        if not records:
            raise ImportValidationError("The file is empty or contains no valid data.")

        count = self.gateway.bulk_upsert_customers(records)

        return {
            "message": f"{count} customers created successfully.",
            "customers": count,
            "skipped": len(self.skipped),
        }

    def _read_rows(self):
        if self.extension == ".csv":
            return iter_csv_rows(self.path)
        if self.extension == ".txt":
            # Each line is one identification number
            return iter_text_lines(self.path, "identification_number")
        raise ImportValidationError("Unsupported file format. Use CSV or TXT.")

    def _parse_rows(self, rows):
        """
        Resolve rows into customer records, dropping the invalid ones.

        RETURNS:
            list: customer dicts ready for bulk_upsert_customers()
        """
        records = []
        # CSV line 1 is the header
        first_row = 2 if self.extension == ".csv" else 1
        for row_num, row in enumerate(rows, start=first_row):
            record, reason = resolve_fields(
                row, CUSTOMER_ALIASES, required=["identification_number"]
            )
            if record is None:
                self.skipped.append(f"Row {row_num}: {reason}")
                continue

            if not is_numeric_identifier(record["identification_number"]):
                self.skipped.append(
                    f"Row {row_num}: Non-numeric identification number "
                    f"{record['identification_number']!r}"
                )
                continue

            records.append(record)

        return records

    def get_import_summary(self):
        """Get a detailed summary of the import."""
        return {
            "batch_id": self.batch_id,
            "skipped": self.skipped,
            "skipped_count": len(self.skipped),
        }
