# =============================================================================
# test_row_parser.py - file → raw rows
# =============================================================================

from importers.row_parser import detect_delimiter, iter_csv_rows, iter_text_lines


def test_detect_delimiter():
    assert detect_delimiter("nombre,correo,telefono") == ","
    assert detect_delimiter("nombre;correo;telefono") == ";"
    assert detect_delimiter("nombre\tcorreo") == "\t"
    assert detect_delimiter("nombre|correo|telefono") == "|"
    # A single column has no delimiter at all: comma is the default
    assert detect_delimiter("identification_number") == ","


def test_csv_rows_in_file_order(write_file):
    path = write_file("c.csv", "nombre,cedula\nAna,1001\nLuis,1002\n")

    assert list(iter_csv_rows(path)) == [
        {"nombre": "Ana", "cedula": "1001"},
        {"nombre": "Luis", "cedula": "1002"},
    ]


def test_values_are_kept_as_strings(write_file):
    path = write_file("c.csv", "cedula,monto\n007,1.50\n")

    assert list(iter_csv_rows(path)) == [{"cedula": "007", "monto": "1.50"}]


def test_semicolon_file(write_file):
    path = write_file("c.csv", "nombre;cedula\nAna;1001\n")

    assert list(iter_csv_rows(path)) == [{"nombre": "Ana", "cedula": "1001"}]


def test_bom_is_stripped_from_first_header(write_file):
    path = write_file("c.csv", "nombre,cedula\nAna,1001\n", encoding="utf-8-sig")

    rows = list(iter_csv_rows(path))

    assert list(rows[0]) == ["nombre", "cedula"]


def test_short_row_gets_empty_strings(write_file):
    path = write_file("c.csv", "a,b,c\n1\n")

    assert list(iter_csv_rows(path)) == [{"a": "1", "b": "", "c": ""}]


def test_long_row_keeps_first_fields(write_file):
    path = write_file("c.csv", "a,b\n4,5\n1,2,3\n")

    assert list(iter_csv_rows(path)) == [{"a": "4", "b": "5"}, {"a": "1", "b": "2"}]


def test_blank_lines_are_skipped(write_file):
    path = write_file("c.csv", "a\n1\n\n2\n")

    assert [row["a"] for row in iter_csv_rows(path)] == ["1", "2"]


def test_rows_stream_across_chunks(write_file):
    path = write_file("c.csv", "a\n1\n2\n3\n")

    assert [row["a"] for row in iter_csv_rows(path, chunk_size=1)] == ["1", "2", "3"]


def test_empty_and_header_only_files_have_no_rows(write_file):
    assert list(iter_csv_rows(write_file("empty.csv", ""))) == []
    assert list(iter_csv_rows(write_file("header.csv", "a,b\n"))) == []


def test_invalid_utf8_bytes_do_not_stop_parsing(write_file):
    path = write_file("c.csv", b"nombre,cedula\nJos\xe9,1\n")

    rows = list(iter_csv_rows(path))

    assert rows[0]["cedula"] == "1"
    assert rows[0]["nombre"].startswith("Jos")


def test_text_lines(write_file):
    path = write_file("ids.txt", "1001\n\n  1002  \n")

    assert list(iter_text_lines(path, "identification_number")) == [
        {"identification_number": "1001"},
        {"identification_number": "1002"},
    ]
