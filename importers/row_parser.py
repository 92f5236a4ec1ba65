# =============================================================================
# importers/row_parser.py
# =============================================================================
# PURPOSE:
#   Turns an uploaded file into a sequence of rows (one dict per row).
#   Knows nothing about customers or invoices - only about text.
#
# TWO FORMATS:
#   1. Delimited with header (CSV):
#        nombre,numero_identificacion,correo
#        Ana Pérez,1001,ana@mail.com
#      → {"nombre": "Ana Pérez", "numero_identificacion": "1001", "correo": "ana@mail.com"}
#
#   2. Line-oriented (TXT), one value per line:
#        1001
#        1002
#      → {"identification_number": "1001"}, {"identification_number": "1002"}
#
# STREAMING:
#   CSV files are read with pandas in CHUNKS of CSV_CHUNK_SIZE rows, and rows
#   are handed out one by one (a generator). A 1 GB file never sits in memory
#   all at once. TXT files are small "one id per line" lists, so they are
#   simply read whole.
#
# PERMISSIVE PARSING:
#   Real exports are messy. A row with too many fields keeps the first ones,
#   a row with too few gets empty strings, bytes that are not valid UTF-8
#   are replaced. None of that stops the import. Only a genuine read failure
#   (file missing, disk error) raises.
# =============================================================================

import pandas as pd
from pandas.errors import EmptyDataError

from config import CSV_CHUNK_SIZE

# Delimiters we recognise, in order of preference when counts tie
CANDIDATE_DELIMITERS = [",", ";", "\t", "|"]

FILE_ENCODING = "utf-8-sig"  # utf-8, plus strips the BOM Excel adds


def detect_delimiter(header_line):
    """
    Guess the delimiter from the header line.

    The candidate that appears most often wins. Spanish-locale Excel saves
    "CSV" with semicolons, which is why this is not just a comma.

    EXAMPLE:
        detect_delimiter("nombre;correo;telefono") → ";"
        detect_delimiter("identification_number")  → ","
    """
    best, best_count = ",", 0
    for candidate in CANDIDATE_DELIMITERS:
        count = header_line.count(candidate)
        if count > best_count:
            best, best_count = candidate, count
    return best


def _read_header_line(path):
    with open(path, "r", encoding=FILE_ENCODING, errors="replace") as fh:
        return fh.readline()


def _read_columns(path, delimiter):
    """Column names only (reads the header, no data rows)."""
    return list(
        pd.read_csv(
            path,
            sep=delimiter,
            nrows=0,
            encoding=FILE_ENCODING,
            encoding_errors="replace",
            engine="python",
        ).columns
    )


def iter_csv_rows(path, chunk_size=None):
    """
    Lazily yield each data row of a delimited file as a dict.

    PARAMETERS:
        path (str): file on disk
        chunk_size (int): rows per pandas chunk (default CSV_CHUNK_SIZE)

    YIELDS:
        dict: column name → raw string ("" for empty/missing cells)

    RAISES:
        OSError: the file could not be read at all
    """
    delimiter = detect_delimiter(_read_header_line(path))

    try:
        width = len(_read_columns(path, delimiter))
    except EmptyDataError:
        # Zero bytes: no header, no rows
        return

    reader = pd.read_csv(
        path,
        sep=delimiter,
        dtype=str,
        keep_default_na=False,
        index_col=False,
        skip_blank_lines=True,
        encoding=FILE_ENCODING,
        encoding_errors="replace",
        engine="python",
        # Too many fields: keep the first `width`, drop the surplus
        on_bad_lines=lambda bad_line: bad_line[:width],
        chunksize=chunk_size or CSV_CHUNK_SIZE,
    )

    with reader:
        for chunk in reader:
            columns = [str(col) for col in chunk.columns]
            for values in chunk.itertuples(index=False, name=None):
                yield {
                    col: ("" if pd.isna(value) else str(value))
                    for col, value in zip(columns, values)
                }


def iter_text_lines(path, field):
    """
    Yield one record per non-empty line of a plain text file.

    PARAMETERS:
        path (str): file on disk
        field (str): the single key every record is stored under

    YIELDS:
        dict: {field: trimmed line}
    """
    with open(path, "r", encoding=FILE_ENCODING, errors="replace") as fh:
        content = fh.read()

    for line in content.splitlines():
        value = line.strip()
        if value:
            yield {field: value}
