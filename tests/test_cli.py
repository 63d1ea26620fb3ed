from __future__ import annotations

import io

import pytest

from table_writer import TableWriter, cli


def test_read_rows_maps_null_token_and_skips_header() -> None:
    stream = io.StringIO("id|name\n1|alice\n2|NULL\n")
    rows = list(cli.read_rows(stream, "|", "NULL", header=True))
    assert rows == [["1", "alice"], ["2", None]]


def test_load_writes_and_closes(sink) -> None:
    writer = TableWriter(database="db", table="t", columns=["a", "b"], capacity=1 << 16, sink=sink)
    rows = cli.read_rows(io.StringIO("1,x\n2,\n"), ",", "", header=False)

    assert cli.load(writer, rows) == 2
    assert sink.rows() == [["1", "x"], ["2", None]]
    assert writer.closed


def test_main_loads_file(clean_env, monkeypatch, sink) -> None:
    data = clean_env / "data.csv"
    data.write_text("a,b\n1,2\n3,4\n", encoding="utf-8")
    monkeypatch.setattr(
        cli.TableWriter,
        "from_config",
        classmethod(lambda cls, config: cls(
            database=config.database,
            table=config.table,
            columns=config.columns,
            capacity=config.capacity,
            sink=sink,
        )),
    )

    status = cli.main([
        "--database", "db",
        "--table", "t",
        "--columns", "a,b",
        "--header",
        str(data),
    ])

    assert status == 0
    assert sink.rows() == [["1", "2"], ["3", "4"]]


def test_main_reports_configuration_error(clean_env, caplog) -> None:
    status = cli.main(["--table", "t", "--columns", "a"])
    assert status == 1
    assert "configuration" in caplog.text


def test_main_reports_wrong_row_width(clean_env, monkeypatch, sink) -> None:
    data = clean_env / "data.csv"
    data.write_text("1,2,3\n", encoding="utf-8")
    monkeypatch.setattr(
        cli.TableWriter,
        "from_config",
        classmethod(lambda cls, config: cls(
            database="db", table="t", columns=["a", "b"], capacity=10, sink=sink
        )),
    )
    assert cli.main(["--database", "db", "--table", "t", "--columns", "a,b", str(data)]) == 1
    assert sink.close_calls == 1


@pytest.mark.parametrize("flag", ["--header", "--null", "--delimiter"])
def test_parser_knows_flag(flag) -> None:
    assert flag in cli.build_parser().format_help()
