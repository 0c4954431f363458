"""
CSV Price Loader
Parse daily OHLCV history files (Yahoo Finance download format) into a PriceRecord
"""
import csv
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from market_analysis.core.exceptions import MissingValueError, SourceDataError
from market_analysis.models.price_record import DailyBar, PriceRecord
from market_analysis.logger import logger


# CSV column -> DailyBar field
COLUMNS = {
    "Open": "open",
    "High": "high",
    "Low": "low",
    "Close": "close",
    "Adj Close": "adj_close",
    "Volume": "volume",
}

_MISSING_MARKERS = {"", "null", "nan", "n/a"}


def parse_date(value: str, date_format: str = "%Y-%m-%d") -> datetime:
    """Parse a date string into a UTC midnight timestamp.

    Raises:
        ValueError: If the string does not match ``date_format``
    """
    return datetime.strptime(value.strip(), date_format).replace(tzinfo=timezone.utc)


class CSVPriceLoader:
    """
    Loader for daily price history CSV files
    Expected format: Date, Open, High, Low, Close, Adj Close, Volume
    """

    @staticmethod
    def parse_csv_file(
        file_path: Union[str, Path],
        date_format: str = "%Y-%m-%d"
    ) -> List[DailyBar]:
        """
        Parse CSV file into daily bars

        Rows whose date cannot be parsed are skipped with a warning. Any other
        missing field aborts the load.

        Args:
            file_path: Path to CSV file
            date_format: Format of the Date column

        Returns:
            Bars in file order

        Raises:
            FileNotFoundError: If the file does not exist
            SourceDataError: If the header lacks a column or a value is invalid
            MissingValueError: If a row lacks a price or volume value

        Expected CSV format:
            Date,Open,High,Low,Close,Adj Close,Volume
            2022-01-03,177.83,182.88,177.71,182.01,181.7784,104487900
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"CSV file not found: {file_path}")

        bars = []
        skipped = []

        with open(path, "r", newline="") as f:
            reader = csv.DictReader(f)
            header = reader.fieldnames or []
            missing_columns = [c for c in ["Date", *COLUMNS] if c not in header]
            if missing_columns:
                raise SourceDataError(
                    f"{path.name}: missing column(s) {', '.join(missing_columns)}"
                )

            for row_num, row in enumerate(reader, start=2):
                try:
                    timestamp = parse_date(row["Date"] or "", date_format)
                except ValueError:
                    skipped.append(f"Row {row_num}: unparseable date '{row['Date']}'")
                    continue

                bars.append(CSVPriceLoader._parse_row(row, row_num, timestamp))

        logger.info(f"Parsed CSV {path.name}: {len(bars)} bars, {len(skipped)} skipped")
        if skipped:
            logger.warning("CSV rows skipped:\n" + "\n".join(skipped[:10]))  # Log first 10

        return bars

    @staticmethod
    def _parse_row(row: Dict[str, str], row_num: int, timestamp: datetime) -> DailyBar:
        fields = {"timestamp": timestamp}
        for column, name in COLUMNS.items():
            raw = (row.get(column) or "").strip()
            if raw.lower() in _MISSING_MARKERS:
                raise MissingValueError(
                    f"Row {row_num}: missing value in the {column} field"
                )
            fields[name] = raw

        try:
            return DailyBar(**fields)
        except ValidationError as e:
            raise SourceDataError(f"Row {row_num}: invalid price data - {e}") from e


def load_price_record(
    file_path: Union[str, Path],
    symbol: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    date_format: str = "%Y-%m-%d"
) -> PriceRecord:
    """Load a CSV file into a PriceRecord restricted to ``[start, end]``."""
    bars = CSVPriceLoader.parse_csv_file(file_path, date_format)
    record = PriceRecord.from_bars(symbol, bars)
    if start is not None or end is not None:
        record = record.between(start, end)
    logger.debug(f"Loaded {len(record)} records for {record.symbol}")
    return record
