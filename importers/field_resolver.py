# =============================================================================
# importers/field_resolver.py
# =============================================================================
# PURPOSE:
#   Finds OUR fields (name, identification_number, invoice_number, ...) in a
#   raw row whose column names were chosen by someone else.
#
# THE PROBLEM:
#   The same column shows up under many names:
#     "name", "Nombre", "nombre_cliente", "NOMBRE DEL CLIENTE"
#   and files exported with the wrong encoding turn
#     "Número de Identificación"  into  "NÃºmero de IdentificaciÃ³n"
#
# THE SOLUTION (two steps):
#   1. canonical_header() rewrites every column name into one simple form:
#        "NÃºmero de IdentificaciÃ³n" → "numero_de_identificacion"
#      (repair mojibake, drop accents, lowercase, spaces → underscores)
#   2. Each logical field has an ORDERED list of accepted aliases, written
#      in that simple form. The first alias present in the row with a
#      non-empty value wins.
# =============================================================================

import re
import unicodedata


# -----------------------------------------------------------------------------
# ALIAS TABLES
# -----------------------------------------------------------------------------
# Order matters: earlier aliases win when a file has more than one.
# The "...in" spellings are what is left when a decoder replaced an accented
# letter with U+FFFD and canonical_header() dropped it ("Identificacin").

CUSTOMER_ALIASES = {
    "identification_number": [
        "identification_number", "numero_identificacion", "numero_de_identificacion",
        "identificacion", "n_identificacion", "no_identificacion", "cedula", "nit",
        "documento", "nmero_de_identificacin", "identificacin",
    ],
    "name": [
        "name", "nombre", "nombre_cliente", "nombre_del_cliente", "customer_name",
        "username", "user",
    ],
    "address": ["address", "direccion", "direccin"],
    "phone": ["phone", "telefono", "telfono", "celular"],
    "email": ["email", "correo", "correo_electronico", "correo_electrnico", "e_mail"],
}

INVOICE_ALIASES = {
    "invoice_number": [
        "invoice_number", "numero_factura", "numero_de_factura", "factura",
        "no_factura", "n_factura", "nmero_de_factura",
    ],
    "billing_period": [
        "billing_period", "periodo_facturacion", "periodo_de_facturacion", "periodo",
        "periodo_de_facturacin", "perodo_de_facturacin", "perodo_facturacin", "perodo",
    ],
    "invoiced_amount": [
        "invoiced_amount", "monto_facturado", "valor_facturado", "total_factura",
    ],
    "paid_amount": ["paid_amount", "monto_pagado", "valor_pagado"],
}

TRANSACTION_ALIASES = {
    "transaction_id": [
        "transaction_id", "id_transaccion", "id_de_la_transaccion", "transaccion_id",
        "id_transaccin", "id_de_la_transaccin",
    ],
    "transaction_date": [
        "transaction_date", "fecha_y_hora_de_la_transaccion", "fecha_hora_transaccion",
        "fecha_transaccion", "fecha_y_hora_de_la_transaccin", "fecha",
    ],
    "amount": [
        "amount", "monto_transaccion", "monto_de_la_transaccion", "valor_transaccion",
        "monto_de_la_transaccin", "monto",
    ],
    "status": [
        "status", "estado_transaccion", "estado_de_la_transaccion",
        "estado_de_la_transaccin", "estado",
    ],
    "type": [
        "type", "tipo_transaccion", "tipo_de_transaccion", "tipo_de_transaccin", "tipo",
    ],
    "platform": ["platform", "plataforma_utilizada", "plataforma"],
}

# One row of the multi-entity file carries all three entities
IMPORT_ALIASES = {**CUSTOMER_ALIASES, **INVOICE_ALIASES, **TRANSACTION_ALIASES}


# -----------------------------------------------------------------------------
# HEADER / VALUE CLEANING
# -----------------------------------------------------------------------------

def _repair_mojibake(text):
    """
    Undo UTF-8 bytes that were decoded as Latin-1 / Windows-1252.

    "IdentificaciÃ³n" → "Identificación". Text that is already correct
    fails the round trip and is returned unchanged.
    """
    for codec in ("latin-1", "cp1252"):
        try:
            return text.encode(codec).decode("utf-8")
        except UnicodeError:
            continue
    return text


def canonical_header(name):
    """
    Rewrite a column name into the form used by the alias tables.

    EXAMPLES:
        "Número de Identificación"    → "numero_de_identificacion"
        "\ufeffNombre "               → "nombre"
        "NÃºmero de Factura"          → "numero_de_factura"
        "Fecha y Hora de la Transacción" → "fecha_y_hora_de_la_transaccion"
    """
    text = str(name).replace("\ufeff", "").strip()
    text = _repair_mojibake(text).replace("\ufffd", "")
    # "é" → "e" + combining accent → "e"
    text = unicodedata.normalize("NFKD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.lower()
    text = re.sub(r"[\s\-./]+", "_", text)
    text = re.sub(r"[^a-z0-9_]", "", text)
    return text.strip("_")


def clean_value(value):
    """Trim a raw cell; empty → None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def canonicalize_row(raw_row):
    """
    Re-key a raw row by canonical column names.

    If two raw columns collapse to the same canonical name, the first one
    with a value is kept.
    """
    row = {}
    for column, value in raw_row.items():
        key = canonical_header(column)
        value = clean_value(value)
        if key not in row or row[key] is None:
            row[key] = value
    return row


# -----------------------------------------------------------------------------
# RESOLUTION
# -----------------------------------------------------------------------------

def resolve_fields(raw_row, aliases, required=()):
    """
    Pull every logical field out of one raw row.

    PARAMETERS:
        raw_row (dict): column name → raw string, straight from the parser
        aliases (dict): logical field → ordered list of canonical aliases
        required (iterable): logical fields that must resolve

    RETURNS:
        tuple: (record, reason)
        - (dict, None) when every required field has a value. The dict has
          one key per logical field; unresolved optional fields are None.
        - (None, "Missing <field>") otherwise

    EXAMPLE:
        resolve_fields({"Nombre": " Ana ", "Cedula": "1001"}, CUSTOMER_ALIASES,
                       required=["identification_number"])
        → ({"identification_number": "1001", "name": "Ana",
            "address": None, "phone": None, "email": None}, None)
    """
    row = canonicalize_row(raw_row)

    record = {}
    for field, names in aliases.items():
        record[field] = next(
            (row[name] for name in names if row.get(name) is not None), None
        )

    for field in required:
        if record.get(field) is None:
            return None, f"Missing {field}"

    return record, None


def is_numeric_identifier(value):
    """True only for a plain string of ASCII digits ("1001", not "10-01")."""
    return value is not None and re.fullmatch(r"[0-9]+", value) is not None


# -----------------------------------------------------------------------------
# FIELD COERCION
# -----------------------------------------------------------------------------

def parse_amount(value):
    """
    Parse a money amount from a cell.

    HANDLES:
        - Empty / None       → None
        - Thousands commas   "1,200.50" → 1200.5
        - Currency symbols   "$100"     → 100.0
        - Anything else unparseable → None
    """
    value = clean_value(value)
    if value is None:
        return None
    cleaned = re.sub(r"[$€£\s,]", "", value)
    try:
        return float(cleaned)
    except ValueError:
        return None


def normalize_billing_period(value):
    """
    Turn a billing period into a full date.

    A 7-character value is a year-month ("2024-05") and gets day "-01".
    Anything else is returned as it came ("2024-05-15" stays).
    """
    if value is not None and len(value) == 7:
        return f"{value}-01"
    return value
