# =============================================================================
# importers/vocabulary.py
# =============================================================================
# PURPOSE:
#   Maps the free-text status / type written in payment files (often in
#   Spanish) to the values we store.
#
#   "Pendiente"        → "PENDING"
#   "COMPLETADA"       → "COMPLETED"
#   "Pago de Factura"  → "INVOICE_PAYMENT"
#
# UNKNOWN VALUES ARE KEPT:
#   A value not in the table is stored upper-cased as it came ("xyz" → "XYZ").
#   It is never rejected.
# =============================================================================


STATUS_MAP = {
    "PENDIENTE": "PENDING",
    "PENDING": "PENDING",
    "COMPLETADA": "COMPLETED",
    "COMPLETADO": "COMPLETED",
    "COMPLETED": "COMPLETED",
    "FALLIDA": "FAILED",
    "FALLIDO": "FAILED",
    "FAILED": "FAILED",
}

TYPE_MAP = {
    "PAGO DE FACTURA": "INVOICE_PAYMENT",
    "PAGO FACTURA": "INVOICE_PAYMENT",
    "INVOICE PAYMENT": "INVOICE_PAYMENT",
    "INVOICE_PAYMENT": "INVOICE_PAYMENT",
}


def _map(token, table):
    if token is None:
        return None
    key = str(token).strip().upper()
    return table.get(key, key)


def map_status(token):
    """Canonical transaction status, or the upper-cased token if unknown."""
    return _map(token, STATUS_MAP)


def map_type(token):
    """Canonical transaction type, or the upper-cased token if unknown."""
    return _map(token, TYPE_MAP)
