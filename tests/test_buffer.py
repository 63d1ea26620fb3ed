from __future__ import annotations

from table_writer.core.buffer import RowBuffer


def test_new_buffer_is_empty() -> None:
    buf = RowBuffer()
    assert len(buf) == 0
    assert buf.watermark == 0
    assert buf.complete() == b""


def test_watermark_moves_only_at_row_end() -> None:
    buf = RowBuffer()
    buf.append_text("aa")
    buf.append_text("\x02")
    assert buf.watermark == 0

    buf.append_text("bb")
    buf.end_row("\n")
    assert buf.watermark == len(buf) == 6
    assert buf.complete_rows == 1

    buf.append_text("cc")
    assert buf.watermark == 6
    assert buf.partial_size == 2
    assert buf.complete() == b"aa\x02bb\n"


def test_drop_complete_keeps_partial_row() -> None:
    buf = RowBuffer()
    buf.append_text("x")
    buf.end_row("\n")
    buf.append_text("y")
    buf.end_row("\n")
    buf.append_text("part")

    buf.drop_complete()

    assert bytes(buf) == b"part"
    assert buf.watermark == 0
    assert buf.complete_rows == 0

    buf.append_text("ial")
    buf.end_row("\n")
    assert buf.complete() == b"partial\n"


def test_drop_complete_without_rows_is_noop() -> None:
    buf = RowBuffer()
    buf.append_text("abc")
    buf.drop_complete()
    assert bytes(buf) == b"abc"


def test_length_counts_encoded_bytes() -> None:
    buf = RowBuffer()
    buf.append_text("é")
    assert len(buf) == 2
