"""Tests for the symbols spreadsheet importer and its CLI."""

import json
from unittest.mock import MagicMock

import pandas as pd
import pytest

from portfolio_tracker.managers import cache_manager
from portfolio_tracker.managers.cache_manager import CacheManager
from portfolio_tracker.models import Symbol
from portfolio_tracker.repositories.base import RepositoryError
from portfolio_tracker.repositories.factory import RepositoryFactory
from portfolio_tracker.scripts import import_symbols
from portfolio_tracker.services.symbol_importer import (
    ImportBatchError,
    ImportFileError,
    ImportReport,
    load_rows,
    map_header,
    parse_rows,
    run_import,
    upsert_in_batches,
)
from portfolio_tracker.services.symbol_service import SYMBOL_CACHE_PREFIX, SymbolService

NSE_ROWS = [
    {"SYMBOL": "RELIANCE", "NAME OF COMPANY": "Reliance Industries Limited", "SERIES": "EQ",
     "ISIN NUMBER": "INE002A01018", "FACE VALUE": "10"},
    {"SYMBOL": "tcs", "NAME OF COMPANY": "Tata Consultancy Services Limited", "SERIES": "EQ",
     "ISIN NUMBER": "INE467B01029", "FACE VALUE": "1"},
    {"SYMBOL": "INFY", "NAME OF COMPANY": " Infosys Limited ", "SERIES": "", "ISIN NUMBER": "   ",
     "FACE VALUE": "5"},
]


@pytest.fixture
def nse_xlsx(tmp_path):
    path = tmp_path / "nse_master.xlsx"
    pd.DataFrame(NSE_ROWS).to_excel(path, index=False)
    return path


class TestHeaderMapping:
    @pytest.mark.parametrize("header,expected", [
        ("Symbol", "symbol"),
        ("  SYMBOL ", "symbol"),
        ("Scrip Code", "symbol"),
        ("SC_CODE", "symbol"),
        ("TradingSymbol", "symbol"),
        ("NAME OF COMPANY", "name"),
        ("Security Name", "name"),
        ("Issuer Name", "name"),
        ("ISIN NUMBER", "isin"),
        ("isin code", "isin"),
        ("Series", "series"),
        ("Industry Type", "industry"),
    ])
    def test_known_headers(self, header, expected):
        assert map_header(header) == expected

    @pytest.mark.parametrize("header", ["FACE VALUE", "Date of Listing", "", None])
    def test_unknown_headers_are_ignored(self, header):
        assert map_header(header) is None


class TestParseRows:
    def test_canonical_record(self):
        records = parse_rows([{"Symbol": "TCS", "Company Name": "Tata Consultancy"}])

        assert records == [{
            "symbol": "TCS",
            "name": "Tata Consultancy",
            "isin": None,
            "exchange": None,
            "instrument_type": None,
            "metadata": {},
        }]

    def test_values_are_trimmed_and_blank_is_absent(self):
        report = ImportReport()
        records = parse_rows(NSE_ROWS, report)

        infy = next(r for r in records if r["symbol"] == "INFY")
        assert infy["name"] == "Infosys Limited"
        assert infy["isin"] is None
        assert infy["exchange"] is None

        tcs = next(r for r in records if r["symbol"] == "TCS")
        assert tcs["exchange"] == "EQ"
        assert tcs["isin"] == "INE467B01029"
        assert report.rows_read == 3
        assert report.rows_parsed == 3

    def test_unidentifiable_rows_are_dropped_and_counted(self):
        report = ImportReport()
        rows = [
            {"Symbol": "TCS", "Company Name": "Tata Consultancy"},
            {"Symbol": "   ", "Company Name": ""},
            {"Symbol": "", "Company Name": "Nameless Symbol Co"},
            {"Symbol": "NONAME", "Company Name": " "},
        ]

        records = parse_rows(rows, report)

        assert report.rows_parsed == 3
        assert report.missing_symbol == 1
        assert report.missing_name == 1
        assert [r["symbol"] for r in records] == ["TCS", "NONAME"]
        assert records[1]["name"] == ""

    def test_duplicate_symbols_keep_last_row(self):
        report = ImportReport()
        rows = [
            {"Symbol": "tcs", "Company Name": "Old Name"},
            {"Symbol": "TCS", "Company Name": "New Name"},
        ]

        records = parse_rows(rows, report)

        assert records == [{
            "symbol": "TCS",
            "name": "New Name",
            "isin": None,
            "exchange": None,
            "instrument_type": None,
            "metadata": {},
        }]
        assert report.duplicates == 1

    def test_sheet_without_known_headers_yields_nothing(self):
        assert parse_rows([{"Foo": "1", "Bar": "2"}]) == []


class TestLoadRows:
    def test_reads_first_sheet_as_text(self, tmp_path):
        path = tmp_path / "bse.xlsx"
        with pd.ExcelWriter(path) as writer:
            pd.DataFrame({"Scrip Code": [500325], "Security Name": ["Reliance"]}).to_excel(
                writer, sheet_name="Equity", index=False
            )
            pd.DataFrame({"Other": ["x"]}).to_excel(writer, sheet_name="Notes", index=False)

        rows = load_rows(path)

        assert rows == [{"Scrip Code": "500325", "Security Name": "Reliance"}]

    def test_reads_csv(self, tmp_path):
        path = tmp_path / "symbols.csv"
        path.write_text("Symbol,Company Name\nNA,Not Applicable Ltd\n", encoding="utf-8")

        rows = load_rows(path)

        # "NA" is a ticker, not a missing value
        assert rows == [{"Symbol": "NA", "Company Name": "Not Applicable Ltd"}]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImportFileError, match="not found"):
            load_rows(tmp_path / "missing.xlsx")

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"definitely not a workbook")
        with pytest.raises(ImportFileError, match="Could not read"):
            load_rows(path)

    def test_empty_sheet(self, tmp_path):
        path = tmp_path / "empty.xlsx"
        pd.DataFrame(columns=["Symbol", "Company Name"]).to_excel(path, index=False)
        with pytest.raises(ImportFileError, match="No rows"):
            load_rows(path)


class TestBatches:
    def test_batches_of_fixed_size_in_order(self):
        repo = MagicMock()
        records = [{"symbol": f"S{i:04d}", "name": f"Company {i}"} for i in range(1201)]
        report = ImportReport()

        upserted = upsert_in_batches(repo, records, batch_size=500, report=report)

        assert upserted == 1201
        assert report.batches == 3
        sizes = [len(c.args[0]) for c in repo.upsert_bulk.call_args_list]
        assert sizes == [500, 500, 201]
        assert repo.upsert_bulk.call_args_list[1].args[0][0]["symbol"] == "S0500"

    def test_failed_batch_stops_the_run(self):
        repo = MagicMock()
        repo.upsert_bulk.side_effect = [500, RepositoryError("Failed to upsert Symbol"), 500]
        records = [{"symbol": f"S{i:04d}", "name": f"Company {i}"} for i in range(1500)]

        with pytest.raises(ImportBatchError) as exc_info:
            upsert_in_batches(repo, records, batch_size=500)

        assert exc_info.value.batch == 2
        assert (exc_info.value.first_row, exc_info.value.last_row) == (501, 1000)
        assert repo.upsert_bulk.call_count == 2


class TestRunImport:
    def test_import_populates_reference_table(self, nse_xlsx, factory, db_session):
        report = run_import(nse_xlsx, factory.get_symbol_repository())

        assert report.upserted == 3
        assert report.batches == 1
        reliance = db_session.get(Symbol, "RELIANCE")
        assert reliance.name == "Reliance Industries Limited"
        assert reliance.isin == "INE002A01018"
        assert reliance.exchange == "EQ"
        assert reliance.meta == {}
        assert db_session.get(Symbol, "TCS") is not None

    def test_reimport_is_idempotent(self, nse_xlsx, factory, db_session):
        repo = factory.get_symbol_repository()

        def table():
            db_session.expire_all()
            return sorted(
                (s.symbol, s.name, s.exchange, s.isin, s.instrument_type, json.dumps(s.meta))
                for s in db_session.query(Symbol).all()
            )

        run_import(nse_xlsx, repo)
        once = table()
        run_import(nse_xlsx, repo)

        assert table() == once
        assert repo.count() == 3

    def test_reimport_overwrites_changed_rows(self, tmp_path, factory, db_session):
        repo = factory.get_symbol_repository()
        path = tmp_path / "nse.xlsx"
        pd.DataFrame([{"Symbol": "TCS", "Company Name": "Tata Consultancy"}]).to_excel(path, index=False)
        run_import(path, repo)

        pd.DataFrame([{"Symbol": "TCS", "Company Name": "TCS Ltd", "Series": "BE"}]).to_excel(path, index=False)
        run_import(path, repo)

        db_session.expire_all()
        tcs = db_session.get(Symbol, "TCS")
        assert (tcs.name, tcs.exchange) == ("TCS Ltd", "BE")
        assert repo.count() == 1

    def test_snapshot_is_written(self, nse_xlsx, factory, tmp_path):
        snapshot = tmp_path / "public" / "symbols.json"

        report = run_import(nse_xlsx, factory.get_symbol_repository(), snapshot_path=snapshot)

        assert report.snapshot_path == str(snapshot)
        data = json.loads(snapshot.read_text(encoding="utf-8"))
        assert {"symbol": "RELIANCE", "name": "Reliance Industries Limited", "exchange": "EQ"} in data
        assert all(set(item) == {"symbol", "name", "exchange"} for item in data)

    def test_dry_run_writes_nothing(self, nse_xlsx, factory):
        report = run_import(nse_xlsx, None, dry_run=True)

        assert report.dry_run is True
        assert report.upserted == 0
        assert factory.get_symbol_repository().count() == 0

    def test_empty_sheet_never_upserts(self, tmp_path):
        path = tmp_path / "empty.xlsx"
        pd.DataFrame(columns=["Symbol"]).to_excel(path, index=False)
        repo = MagicMock()

        with pytest.raises(ImportFileError):
            run_import(path, repo)
        repo.upsert_bulk.assert_not_called()


class TestImportCli:
    @pytest.fixture(autouse=True)
    def _no_auto_create(self, monkeypatch):
        monkeypatch.setattr(import_symbols.settings, "DB_AUTO_CREATE", False)

    def test_successful_run_exits_zero(self, nse_xlsx, session_factory, monkeypatch):
        monkeypatch.setattr(import_symbols, "SessionLocal", session_factory)

        assert import_symbols.main([str(nse_xlsx), "--batch-size", "2"]) == 0

        session = session_factory()
        try:
            assert session.query(Symbol).count() == 3
        finally:
            session.close()

    def test_missing_file_exits_non_zero(self, tmp_path, session_factory, monkeypatch):
        monkeypatch.setattr(import_symbols, "SessionLocal", session_factory)
        assert import_symbols.main([str(tmp_path / "nope.xlsx")]) == 1

    def test_failed_batch_exits_non_zero(self, nse_xlsx, session_factory, monkeypatch):
        monkeypatch.setattr(import_symbols, "SessionLocal", session_factory)
        monkeypatch.setattr(
            import_symbols, "run_import", MagicMock(side_effect=ImportBatchError(1, 1, 500))
        )
        assert import_symbols.main([str(nse_xlsx)]) == 1

    def test_dry_run(self, nse_xlsx, session_factory, monkeypatch):
        session_local = MagicMock()
        monkeypatch.setattr(import_symbols, "SessionLocal", session_local)

        assert import_symbols.main([str(nse_xlsx), "--dry-run"]) == 0
        session_local.assert_not_called()

    def test_rejects_non_positive_batch_size(self, nse_xlsx):
        assert import_symbols.main([str(nse_xlsx), "--batch-size", "0"]) == 2

    def test_successful_run_clears_lookup_cache(self, nse_xlsx, session_factory, monkeypatch):
        monkeypatch.setattr(import_symbols, "SessionLocal", session_factory)
        clear_cache = MagicMock()
        monkeypatch.setattr(import_symbols, "clear_symbol_cache", clear_cache)

        assert import_symbols.main([str(nse_xlsx)]) == 0
        clear_cache.assert_called_once_with()

    def test_failed_run_keeps_lookup_cache(self, tmp_path, session_factory, monkeypatch):
        monkeypatch.setattr(import_symbols, "SessionLocal", session_factory)
        clear_cache = MagicMock()
        monkeypatch.setattr(import_symbols, "clear_symbol_cache", clear_cache)

        assert import_symbols.main([str(tmp_path / "nope.xlsx")]) == 1
        clear_cache.assert_not_called()

    def test_reimport_refreshes_cached_lookup(self, tmp_path, session_factory, dict_redis, monkeypatch):
        monkeypatch.setattr(import_symbols, "SessionLocal", session_factory)
        monkeypatch.setattr(import_symbols.settings, "CACHE_ENABLED", True)
        monkeypatch.setattr(cache_manager, "redis_client", dict_redis)
        path = tmp_path / "nse.xlsx"

        def lookup(query):
            session = session_factory()
            try:
                service = SymbolService(
                    RepositoryFactory(session).get_symbol_repository(),
                    cache=CacheManager(prefix=SYMBOL_CACHE_PREFIX),
                )
                return [r.name for r in service.search(query)]
            finally:
                session.close()

        pd.DataFrame([{"Symbol": "TCS", "Company Name": "Tata Consultancy"}]).to_excel(path, index=False)
        assert import_symbols.main([str(path)]) == 0
        assert lookup("tata") == ["Tata Consultancy"]

        pd.DataFrame([{"Symbol": "TCS", "Company Name": "Tata Consultancy Services Ltd"}]).to_excel(path, index=False)
        assert import_symbols.main([str(path)]) == 0
        assert lookup("tata") == ["Tata Consultancy Services Ltd"]
