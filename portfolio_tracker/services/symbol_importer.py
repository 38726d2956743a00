"""
Spreadsheet import for the symbols reference table.

Reads the first sheet of an exchange master file (e.g. the NSE/BSE equity
lists), maps its headers onto ``symbol``/``name``/``isin``/``series``,
and upserts the rows keyed by ticker in fixed-size batches.
"""
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from slugify import slugify

from portfolio_tracker.core.logger import logger
from portfolio_tracker.repositories.base import RepositoryError
from portfolio_tracker.repositories.symbols import SymbolRepository
from portfolio_tracker.scripts.json_utils import to_json

BATCH_SIZE = 500

# slugified header -> canonical field
COLUMN_MAP: Dict[str, str] = {
    "symbol": "symbol",
    "scrip": "symbol",
    "scrip_code": "symbol",
    "tradingsymbol": "symbol",
    "sc_code": "symbol",

    "name_of_company": "name",
    "security_name": "name",
    "company_name": "name",
    "issuer_name": "name",
    "company": "name",

    "isin_number": "isin",
    "isin": "isin",
    "isin_code": "isin",

    "series": "series",
    "industry": "industry",
    "industry_type": "industry",
}


class SymbolImportError(Exception):
    """Base error of a symbols import run"""
    pass


class ImportFileError(SymbolImportError):
    """Spreadsheet missing, unreadable or empty"""
    pass


class ImportBatchError(SymbolImportError):
    def __init__(self, batch: int, first_row: int, last_row: int):
        self.batch = batch
        self.first_row = first_row
        self.last_row = last_row
        super().__init__(f"Upsert failed for batch {batch} (rows {first_row}..{last_row})")


@dataclass
class ImportReport:
    rows_read: int = 0
    rows_parsed: int = 0
    missing_symbol: int = 0
    missing_name: int = 0
    duplicates: int = 0
    upserted: int = 0
    batches: int = 0
    snapshot_path: Optional[str] = None
    dry_run: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def map_header(raw_header: Any) -> Optional[str]:
    """Canonical field for a spreadsheet header, None if unrecognized."""
    if raw_header is None:
        return None
    text = str(raw_header).strip()
    if not text:
        return None
    return COLUMN_MAP.get(slugify(text, separator="_", lowercase=True))


def build_header_map(headers: List[Any]) -> Dict[Any, Optional[str]]:
    return {h: map_header(h) for h in headers}


def load_rows(path: Path) -> List[Dict[str, Any]]:
    """Rows of the first sheet as header -> cell text."""
    path = Path(path)
    if not path.exists():
        raise ImportFileError(f"Spreadsheet not found at {path}")

    try:
        if path.suffix.lower() == ".csv":
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
        else:
            df = pd.read_excel(path, sheet_name=0, dtype=str, keep_default_na=False)
    except Exception as e:
        raise ImportFileError(f"Could not read spreadsheet {path}: {e}") from e

    if df.empty:
        raise ImportFileError("No rows found in the sheet.")

    return df.to_dict(orient="records")


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def project_row(row: Dict[str, Any], header_map: Dict[Any, Optional[str]]) -> Dict[str, str]:
    """Keep recognized columns only, as trimmed text. Blank cells are dropped."""
    out: Dict[str, str] = {}
    for header, field in header_map.items():
        if not field:
            continue
        value = _clean(row.get(header))
        if value is None:
            continue
        out[field] = value
    return out


def canonicalize(record: Dict[str, str]) -> Dict[str, Any]:
    return {
        "symbol": record.get("symbol", "").upper(),
        "name": record.get("name", ""),
        "isin": record.get("isin") or None,
        "exchange": record.get("series") or None,
        "instrument_type": None,
        "metadata": {},
    }


def parse_rows(rows: List[Dict[str, Any]], report: Optional[ImportReport] = None) -> List[Dict[str, Any]]:
    """
    Turn raw sheet rows into canonical symbol records, one per ticker.
    Later rows win when a ticker repeats.
    """
    report = report or ImportReport()
    report.rows_read = len(rows)
    if not rows:
        return []

    header_map = build_header_map(list(rows[0].keys()))
    logger.info(f"Detected headers: {list(header_map.keys())}")
    logger.info(f"Header mapping -> {header_map}")

    projected = [project_row(r, header_map) for r in rows]
    projected = [r for r in projected if r.get("symbol") or r.get("name")]

    report.rows_parsed = len(projected)
    report.missing_symbol = sum(1 for r in projected if not r.get("symbol"))
    report.missing_name = sum(1 for r in projected if not r.get("name"))
    logger.info(f"Parsed rows: {report.rows_parsed}")
    logger.info(f"Missing symbol: {report.missing_symbol}, Missing name: {report.missing_name}")
    if report.missing_symbol:
        logger.warning("Some rows lack a symbol. Extend COLUMN_MAP to match your header names.")

    unique: Dict[str, Dict[str, Any]] = {}
    for record in (canonicalize(r) for r in projected):
        # symbol is the conflict key, a row without one cannot be stored
        if not record["symbol"]:
            continue
        unique[record["symbol"]] = record

    report.duplicates = report.rows_parsed - report.missing_symbol - len(unique)
    if report.duplicates:
        logger.info(f"Collapsed {report.duplicates} duplicate symbols")

    return list(unique.values())


def upsert_in_batches(
        repo: SymbolRepository,
        records: List[Dict[str, Any]],
        batch_size: int = BATCH_SIZE,
        report: Optional[ImportReport] = None,
) -> int:
    """Apply batches in order, stopping at the first failure."""
    report = report or ImportReport()
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")

    for batch_no, start in enumerate(range(0, len(records), batch_size), start=1):
        chunk = records[start:start + batch_size]
        first_row, last_row = start + 1, start + len(chunk)
        logger.info(f"Upserting rows {first_row}..{last_row}")
        try:
            repo.upsert_bulk(chunk)
        except RepositoryError as e:
            logger.error(f"Upsert error in batch {batch_no} (rows {first_row}..{last_row}): {e}")
            raise ImportBatchError(batch_no, first_row, last_row) from e
        report.batches = batch_no
        report.upserted += len(chunk)

    logger.info(f"Upsert complete. Total rows upserted: {report.upserted}")
    return report.upserted


def write_snapshot(records: List[Dict[str, Any]], path: Path) -> bool:
    """Flattened {symbol, name, exchange} list for offline autocomplete."""
    data = [
        {"symbol": r["symbol"], "name": r["name"], "exchange": r.get("exchange") or None}
        for r in records
    ]
    try:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(to_json(data, indent=2), encoding="utf-8")
        logger.info(f"Wrote snapshot JSON: {path}")
        return True
    except OSError as e:
        logger.warning(f"Could not write snapshot JSON {path}: {e}")
        return False


def run_import(
        path: Path,
        repo: Optional[SymbolRepository],
        batch_size: int = BATCH_SIZE,
        snapshot_path: Optional[Path] = None,
        dry_run: bool = False,
) -> ImportReport:
    report = ImportReport(dry_run=dry_run)

    logger.info(f"Reading spreadsheet: {path}")
    rows = load_rows(Path(path))
    records = parse_rows(rows, report)

    if dry_run:
        logger.info(f"Dry run: {len(records)} symbols would be upserted")
    else:
        if repo is None:
            raise ValueError("A SymbolRepository is required unless dry_run is set")
        upsert_in_batches(repo, records, batch_size=batch_size, report=report)

    if snapshot_path and write_snapshot(records, Path(snapshot_path)):
        report.snapshot_path = str(snapshot_path)

    return report
