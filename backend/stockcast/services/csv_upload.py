import logging
import pandas as pd
from dataclasses import dataclass, field
from io import StringIO
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from stockcast.config.settings import settings
from stockcast.schemas import ObservationSchema

logger = logging.getLogger(__name__)


# Column alias mapping for ingestion
COLUMN_ALIASES: Dict[str, List[str]] = {
    'date': [
        'date', 'trade_date', 'tradedate', 'trading_date', 'session',
        'timestamp', 'time', 'datetime', 'day', 'dt', 'as_of', 'asof'
    ],
    'price': [
        'price', 'close', 'close_price', 'closeprice', 'closing_price',
        'adj_close', 'adjclose', 'adjusted_close', 'last', 'last_price',
        'lastprice', 'px_last', 'value'
    ],
    'volume': [
        'volume', 'vol', 'shares', 'shares_traded', 'sharestraded',
        'qty', 'quantity', 'traded_volume', 'turnover_volume'
    ]
}

REQUIRED_COLUMNS = ['date', 'price', 'volume']


def find_column_match(columns: List[str], target: str) -> Optional[str]:
    """
    Find a column that matches the target, checking aliases.
    Returns the original column name if found, None otherwise.
    """
    aliases = COLUMN_ALIASES.get(target, [target])
    columns_lower = {str(c).lower().strip().replace(' ', '_').replace('-', '_'): c for c in columns}

    for alias in aliases:
        if alias in columns_lower:
            return columns_lower[alias]

    return None


def _is_date_col(series: pd.Series) -> bool:
    sample = series.dropna().head(20)
    if len(sample) == 0 or pd.api.types.is_numeric_dtype(sample):
        return False
    parsed = pd.to_datetime(sample, errors='coerce', format='mixed')
    return parsed.notna().mean() > 0.8


def _clean_numeric(series: pd.Series) -> pd.Series:
    """'$1,234.50' -> 1234.5; unparseable -> NaN. Signs and exponents are kept."""
    if not pd.api.types.is_numeric_dtype(series):
        series = series.astype(str).str.replace(r'[$€£₹,\s]', '', regex=True)
    return pd.to_numeric(series, errors='coerce')


def map_columns(df: pd.DataFrame) -> Tuple[pd.DataFrame, Dict[str, str], List[str]]:
    """
    Smart column mapping - automatically detects and renames columns.
    1. Tries header-based mapping first (aliases).
    2. If that fails, infers from content: a date-like column becomes
       'date'; of the numeric columns, the one with the smaller median
       becomes 'price' and the larger one 'volume'.

    Returns:
        - DataFrame with standardized column names
        - Dict showing which original columns mapped to which standard names
        - List of missing required columns (if any)
    """
    original_columns = list(df.columns)
    mapping: Dict[str, str] = {}

    # 1. Header-Based Mapping
    for target in REQUIRED_COLUMNS:
        original_col = find_column_match(original_columns, target)
        if original_col is not None and original_col not in mapping:
            mapping[original_col] = target

    missing = [t for t in REQUIRED_COLUMNS if t not in mapping.values()]
    if missing:
        # 2. Content-Based Inference
        logger.info(f"Header mapping failed for {missing}. Trying content inference...")
        remaining = [c for c in original_columns if c not in mapping]

        if 'date' in missing:
            for col in remaining:
                if _is_date_col(df[col]):
                    mapping[col] = 'date'
                    remaining.remove(col)
                    missing.remove('date')
                    break

        numeric_needed = [t for t in ('price', 'volume') if t in missing]
        if numeric_needed:
            candidates = []
            for col in remaining:
                cleaned = _clean_numeric(df[col])
                if cleaned.notna().mean() > 0.8:
                    candidates.append((cleaned.median(), col))

            if len(numeric_needed) == 2 and len(candidates) >= 2:
                candidates.sort()
                mapping[candidates[0][1]] = 'price'
                mapping[candidates[-1][1]] = 'volume'
                missing.remove('price')
                missing.remove('volume')
            elif len(numeric_needed) == 1 and candidates:
                mapping[candidates[0][1]] = numeric_needed[0]
                missing.remove(numeric_needed[0])

    df = df.rename(columns=mapping)
    return df, {str(k): v for k, v in mapping.items()}, missing


@dataclass
class SeriesParseResult:
    """Outcome of parsing an uploaded series."""
    observations: List[ObservationSchema] = field(default_factory=list)
    rows_processed: int = 0
    rows_failed: int = 0
    errors: List[str] = field(default_factory=list)
    column_mapping: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return len(self.observations) > 0


class SeriesUploadService:
    """Turns an uploaded CSV into a clean, chronological series."""

    def __init__(self, max_errors: Optional[int] = None):
        self.max_errors = max_errors if max_errors is not None else settings.MAX_UPLOAD_ERRORS

    def parse_csv(self, file_content: str) -> SeriesParseResult:
        """
        Process uploaded CSV file with SMART COLUMN MAPPING.

        Automatically detects common column name variations like:
        - 'close' or 'adj_close' -> 'price'
        - 'vol' or 'shares' -> 'volume'
        - 'timestamp' -> 'date'

        Rows that fail validation are skipped and reported (up to
        max_errors messages). Duplicate dates keep the last row.
        """
        try:
            df = pd.read_csv(StringIO(file_content))
        except pd.errors.EmptyDataError:
            return SeriesParseResult(errors=["Empty CSV file"])
        except pd.errors.ParserError as e:
            return SeriesParseResult(errors=[f"Failed to parse CSV: {e}"])

        df, column_mapping, missing_cols = map_columns(df)

        if missing_cols:
            # Provide helpful error with suggestions
            suggestions = []
            for col in missing_cols:
                aliases = COLUMN_ALIASES.get(col, [])[:5]
                suggestions.append(f"'{col}' (we look for: {', '.join(aliases)})")

            return SeriesParseResult(
                rows_failed=len(df),
                column_mapping=column_mapping,
                errors=[
                    f"Could not find columns: {', '.join(missing_cols)}",
                    f"We auto-detect common names. Missing: {'; '.join(suggestions)}"
                ]
            )

        # Vectorized normalization
        df['date'] = pd.to_datetime(df['date'], errors='coerce', format='mixed').dt.date
        for col in ['price', 'volume']:
            df[col] = _clean_numeric(df[col])

        result = SeriesParseResult(column_mapping=column_mapping)
        by_date: Dict = {}

        for idx, row_data in enumerate(df[REQUIRED_COLUMNS].to_dict('records')):
            try:
                if pd.isna(row_data['date']):
                    raise ValueError("invalid or missing date")
                if pd.isna(row_data['price']) or pd.isna(row_data['volume']):
                    raise ValueError("invalid or missing number")
                if not float(row_data['volume']).is_integer():
                    raise ValueError(f"volume must be a whole number, got {row_data['volume']}")

                validated = ObservationSchema(
                    date=row_data['date'],
                    price=row_data['price'],
                    volume=int(row_data['volume'])
                )
                by_date[validated.date] = validated
                result.rows_processed += 1
            except (ValueError, ValidationError) as e:
                result.rows_failed += 1
                if len(result.errors) < self.max_errors:
                    # +2: header row and 1-based numbering
                    err_msg = f"Row {idx + 2}: {e}"
                    result.errors.append(err_msg)
                    logger.debug(f"Validation error: {err_msg}")

        result.observations = [by_date[d] for d in sorted(by_date)]
        return result
