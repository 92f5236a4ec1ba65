# =============================================================================
# importers/errors.py
# =============================================================================
# Two kinds of import failure, because the caller treats them differently:
#
#   ImportValidationError → the FILE is the problem (wrong extension, empty,
#                           nothing usable). Tell the user; HTTP 400.
#   RowImportError        → a row could not be written. Rows before it are
#                           already saved, rows after it were not tried.
#                           HTTP 500.
# =============================================================================


class ImportValidationError(ValueError):
    """The uploaded file (or request) cannot be imported as given."""


class RowImportError(RuntimeError):
    """Writing one row failed; the import stopped at that row."""

    def __init__(self, row_number, rows_committed, cause):
        self.row_number = row_number
        self.rows_committed = rows_committed
        self.cause = cause
        super().__init__(
            f"Row {row_number} failed after {rows_committed} rows were saved: {cause}"
        )
