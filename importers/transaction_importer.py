# =============================================================================
# importers/transaction_importer.py
# =============================================================================
# PURPOSE:
#   Imports a payments export where EVERY ROW carries three things at once:
#   a customer, the invoice billed to them, and a transaction paying it.
#
# EXAMPLE FILE:
#   id_transaccion,fecha_transaccion,monto_transaccion,estado_transaccion,tipo_transaccion,
#   nombre,numero_identificacion,direccion,telefono,correo,plataforma,
#   numero_factura,periodo_facturacion,monto_facturado,monto_pagado
#
# WHAT HAPPENS TO EACH ROW (in file order, one row at a time):
#   1. Upsert the CUSTOMER by identification number → customer id
#   2. Upsert the INVOICE by invoice number, owned by that customer id.
#      A billing period like "2024-05" becomes "2024-05-01".
#   3. Insert the TRANSACTION for that invoice id. If the transaction id is
#      already in the database nothing happens.
#   4. Count what was written
#
# WHY ONE ROW AT A TIME?
#   Step 2 needs the id produced by step 1, and step 3 needs the id from
#   step 2. Rows that repeat a customer or invoice must also be applied in
#   file order so the last row wins.
#
# COUNTERS:
#   customers / invoices: only rows that were really NEW
#   transactions: EVERY processed row, even when the insert was ignored
#                 because the id already existed
#
# FAILURES:
#   Rows are NOT checked up front. A row missing, say, its identification
#   number makes the customer write fail, and the import STOPS there. Rows
#   before it stay saved (each write commits on its own); rows after it are
#   never attempted.
# =============================================================================

from datetime import datetime

from .errors import ImportValidationError, RowImportError
from .field_resolver import (
    IMPORT_ALIASES,
    normalize_billing_period,
    parse_amount,
    resolve_fields,
)
from .row_parser import iter_csv_rows
from .vocabulary import map_status, map_type


def split_record(record):
    """
    Derive the three entity fragments from one resolved row.

    RETURNS:
        tuple: (customer, invoice, transaction) dicts, natural keys included
    """
    customer = {
        "identification_number": record.get("identification_number"),
        "name": record.get("name"),
        "address": record.get("address"),
        "phone": record.get("phone"),
        "email": record.get("email"),
    }
    invoice = {
        "invoice_number": record.get("invoice_number"),
        "billing_period": normalize_billing_period(record.get("billing_period")),
        "invoiced_amount": parse_amount(record.get("invoiced_amount")),
        "paid_amount": parse_amount(record.get("paid_amount")),
    }
    transaction = {
        "transaction_id": record.get("transaction_id"),
        "transaction_date": record.get("transaction_date"),
        "amount": parse_amount(record.get("amount")),
        "status": map_status(record.get("status")),
        "type": map_type(record.get("type")),
        "platform": record.get("platform"),
    }
    return customer, invoice, transaction


class TransactionImporter:
    """
    Imports customer + invoice + transaction rows.

    USAGE:
        importer = TransactionImporter(gateway)
        result = importer.import_file("/tmp/upload.csv")
        # {"message": ..., "customers": 2, "invoices": 2, "transactions": 3, "rows": 3}
    """

    def __init__(self, gateway):
        self.gateway = gateway
        self.batch_id = datetime.now().strftime("batch_%Y%m%d_%H%M%S")
        self.counts = {"customers": 0, "invoices": 0, "transactions": 0}
        self.rows_processed = 0

    def import_file(self, path):
        """Stream a CSV file through import_rows()."""
        return self.import_rows(iter_csv_rows(path))

    def import_rows(self, rows):
        """
        Apply every row, strictly in order.

        PARAMETERS:
            rows (iterable): raw row dicts from the row parser

        RETURNS:
            dict: message + customers, invoices, transactions, rows

        RAISES:
            ImportValidationError: the file had no data rows
            RowImportError: a row could not be written (earlier rows stay saved)
        """
        for row_num, row in enumerate(rows, start=2):
            record, _ = resolve_fields(row, IMPORT_ALIASES)
            try:
                self._import_record(record)
            except Exception as e:
                print(f"[ERROR] {self.batch_id}: row {row_num} failed: {e}")
                raise RowImportError(row_num, self.rows_processed, e) from e
            self.rows_processed += 1

        if self.rows_processed == 0:
            raise ImportValidationError("The file is empty or contains no valid data.")

        print(
            f"[OK] {self.batch_id}: {self.rows_processed} rows -> "
            f"{self.counts['customers']} customers, {self.counts['invoices']} invoices, "
            f"{self.counts['transactions']} transactions"
        )

        return {
            "message": f"Import finished: {self.rows_processed} rows processed.",
            **self.counts,
            "rows": self.rows_processed,
        }

    def _import_record(self, record):
        customer, invoice, transaction = split_record(record)

        # --- 1. Customer ---
        customer_id, customer_new = self.gateway.upsert_customer(
            customer.pop("identification_number"), customer
        )
        if customer_new:
            self.counts["customers"] += 1

        # --- 2. Invoice (needs the customer id) ---
        invoice_id, invoice_new = self.gateway.upsert_invoice(
            invoice.pop("invoice_number"), customer_id, invoice
        )
        if invoice_new:
            self.counts["invoices"] += 1

        # --- 3. Transaction (needs the invoice id) ---
        self.gateway.insert_transaction_ignore_conflict(
            transaction.pop("transaction_id"), invoice_id, transaction
        )
        # Counted whether or not the insert was ignored
        self.counts["transactions"] += 1

    def get_import_summary(self):
        """Get a detailed summary of the import."""
        return {
            "batch_id": self.batch_id,
            "rows_processed": self.rows_processed,
            **self.counts,
        }
