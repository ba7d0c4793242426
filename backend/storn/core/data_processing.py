"""
Data processing utilities for Storn
"""
import json
import math
import re
from datetime import date, datetime

import numpy as np
import pandas as pd

SUPPORTED_EXTENSIONS = ('.csv', '.xlsx', '.xls')

_NUMBER_PATTERN = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$')
_LEADING_NUMBER_PATTERN = re.compile(r'\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?')


def load_data_file(source, filename):
    """Load an uploaded CSV/XLSX file into a DataFrame of raw cell values.

    CSV cells are kept as text (no type guessing) so the analytics layer sees
    the values exactly as the merchant exported them.
    """
    name = filename.lower()
    if name.endswith('.csv'):
        return pd.read_csv(source, dtype=str, keep_default_na=False, encoding='utf-8-sig')
    elif name.endswith(('.xlsx', '.xls')):
        return pd.read_excel(source, dtype=object)
    raise ValueError('Unsupported file type. Please upload CSV or Excel files.')


def frame_to_records(df):
    """Convert a DataFrame to a list of plain dict records (NaN becomes None)"""
    records = []
    for row in df.to_dict(orient='records'):
        records.append({str(k): _native(v) for k, v in row.items()})
    return records


def _native(value):
    if value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.isoformat()
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, (float, np.floating)):
        f = float(value)
        return None if math.isnan(f) or math.isinf(f) else f
    if isinstance(value, np.bool_):
        return bool(value)
    return value


def is_blank(value):
    """True for None, NaN and empty/whitespace strings"""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    if isinstance(value, float):
        return math.isnan(value)
    return False


def to_float(value):
    """Parse a cell as a finite float; returns None when it cannot be parsed.

    Booleans are not numbers here, and strings must be plain decimal
    notation (no thousands separators or currency symbols).
    """
    if value is None or isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        return _finite(value)
    if isinstance(value, str):
        text = value.strip()
        if not _NUMBER_PATTERN.match(text):
            return None
        return _finite(text)
    return None


def _finite(value):
    try:
        f = float(value)
    except OverflowError:
        return None
    return f if math.isfinite(f) else None


def leading_float(value):
    """Parse the number a cell starts with, ignoring any trailing text.

    ``"15%"`` reads as 15 and ``"100 SAR"`` as 100. Text that does not start
    with a number gives None. Non-string cells go through ``to_float``.
    """
    if not isinstance(value, str):
        return to_float(value)
    match = _LEADING_NUMBER_PATTERN.match(value)
    if match is None:
        return None
    return _finite(match.group(0))


def to_revenue(value):
    """Revenue cells: blank counts as a zero-value order, garbage is skipped"""
    if is_blank(value):
        return 0.0
    return leading_float(value)


def _date_text(value):
    if value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.isoformat()
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, str):
        text = value.strip()
        # bare numbers are amounts or ids, never dates
        if not text or _NUMBER_PATTERN.match(text):
            return None
        return text
    return None


def parse_dates(values):
    """Parse a sequence of cells into a naive datetime Series (NaT when invalid)"""
    text = pd.Series([_date_text(v) for v in values], dtype=object)
    if text.empty or text.isna().all():
        return pd.Series(pd.NaT, index=text.index, dtype='datetime64[ns]')
    parsed = pd.to_datetime(text, errors='coerce', utc=True, format='mixed')
    return parsed.dt.tz_localize(None)


def parse_floats(values):
    """Parse a sequence of cells into a float Series (NaN when unparseable)"""
    return pd.Series([to_float(v) for v in values], dtype=float)


def parse_revenues(values):
    return pd.Series([to_revenue(v) for v in values], dtype=float)


def cell_key(value):
    """Hashable identity of a cell value, used for unique/duplicate counting"""
    if isinstance(value, (list, dict)):
        return json.dumps(value, sort_keys=True, default=str)
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def sanitize_for_json(value):
    """Recursively convert data structures to be JSON serializable.
    - Replace NaN/Inf with None
    - Convert numpy/pandas scalars to native Python types
    """
    if isinstance(value, dict):
        return {str(k): sanitize_for_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [sanitize_for_json(v) for v in value]

    if value is pd.NaT:
        return None
    if isinstance(value, (np.bool_, bool)):
        return bool(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, (float, np.floating)):
        f = float(value)
        if math.isnan(f) or math.isinf(f):
            return None
        return f
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.isoformat()
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
