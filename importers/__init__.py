# =============================================================================
# importers/__init__.py
# =============================================================================
# PURPOSE:
#   Makes the importers folder a Python package and provides easy imports.
#
# THE PIPELINE:
#   row_parser      → file → raw row dicts (CSV streamed, TXT line by line)
#   field_resolver  → raw row → our field names, trimmed values
#   vocabulary      → "Pendiente" → "PENDING", "Pago de Factura" → "INVOICE_PAYMENT"
#   importers       → rows → database
#
# AVAILABLE IMPORTERS:
#   - CustomerImporter: the legacy customers-only CSV/TXT upload
#   - TransactionImporter: customer + invoice + transaction per row
#   - Normalizer: cleans and deduplicates a file into OUTPUT_DIR (no database)
# =============================================================================

from .errors import ImportValidationError, RowImportError
from .customer_importer import CustomerImporter
from .transaction_importer import TransactionImporter, split_record
from .normalizer import Normalizer, deduplicate
