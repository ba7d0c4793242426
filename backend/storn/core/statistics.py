"""
Role-agnostic statistics: column summaries, correlations and value distributions
"""
import logging
import math
import re
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np
import pandas as pd

from storn.core.data_processing import cell_key, is_blank, parse_dates, parse_floats, to_float
from storn.core.models import ColumnStat

logger = logging.getLogger(__name__)

DATE_NAME_PATTERN = re.compile(r'date|time|created|ordered|purchased|تاريخ', re.IGNORECASE)
DATE_RATIO = 0.7
NUMERIC_RATIO = 0.8
BOOLEAN_TEXT = frozenset(['true', 'false'])

CORRELATION_THRESHOLD = 0.3
TOP_DISTRIBUTION_VALUES = 20


def column_values(records: Sequence[Mapping[str, Any]], column: str) -> List[Any]:
    """Values of a column, taken only from rows where the key is present"""
    return [row[column] for row in records if column in row]


def _is_boolean(value):
    if isinstance(value, (bool, np.bool_)):
        return True
    return isinstance(value, str) and value.strip().lower() in BOOLEAN_TEXT


def infer_type(name: str, non_null: Sequence[Any]) -> str:
    """Classify a column as date, boolean, numeric or text"""
    if DATE_NAME_PATTERN.search(name):
        return 'date'
    if not non_null:
        return 'text'
    if parse_dates(non_null).notna().sum() / len(non_null) >= DATE_RATIO:
        return 'date'
    if all(_is_boolean(v) for v in non_null):
        return 'boolean'
    parsed = sum(1 for v in non_null if to_float(v) is not None)
    if parsed / len(non_null) >= NUMERIC_RATIO:
        return 'numeric'
    return 'text'


def _length_stats(non_null):
    lengths = [len(str(v)) for v in non_null]
    if not lengths:
        return {}
    return {
        'min_length': min(lengths),
        'max_length': max(lengths),
        'avg_length': sum(lengths) / len(lengths),
    }


def _numeric_stats(non_null):
    numbers = [f for f in (to_float(v) for v in non_null) if f is not None]
    if not numbers:
        return {}
    numbers.sort()
    n = len(numbers)
    mean = sum(numbers) / n
    variance = sum((x - mean) ** 2 for x in numbers) / n
    return {
        'min': numbers[0],
        'max': numbers[-1],
        'mean': mean,
        # even-length arrays take the element at n // 2, no averaging
        'median': numbers[n // 2],
        'std_dev': math.sqrt(variance),
    }


def analyze_column(records: Sequence[Mapping[str, Any]], name: str) -> ColumnStat:
    values = column_values(records, name)
    non_null = [v for v in values if not is_blank(v)]
    inferred = infer_type(name, non_null)

    extra: Dict[str, Any] = {}
    if inferred == 'numeric':
        extra = _numeric_stats(non_null)
    elif inferred in ('text', 'date'):
        extra = _length_stats(non_null)
        if inferred == 'date':
            dates = parse_dates(non_null).dropna()
            if not dates.empty:
                extra['min_date'] = dates.min().date().isoformat()
                extra['max_date'] = dates.max().date().isoformat()

    return ColumnStat(
        name=name,
        inferred_type=inferred,
        count=len(values),
        unique_count=len({cell_key(v) for v in non_null}),
        null_count=len(values) - len(non_null),
        **extra
    )


def analyze_dataset(records: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """Per-column statistics for every column of the first record"""
    if not records:
        return {'columnStats': [], 'rowCount': 0, 'columnCount': 0}

    columns = list(records[0].keys())
    stats = [analyze_column(records, col).to_dict() for col in columns]
    logger.info("Statistical summary computed for %d columns", len(columns))
    return {
        'rowCount': len(records),
        'columnCount': len(columns),
        'columnStats': stats,
    }


def numeric_columns(records: Sequence[Mapping[str, Any]], ratio: float = NUMERIC_RATIO) -> List[str]:
    """Columns of the first record where more than ``ratio`` of all rows parse as numbers"""
    if not records:
        return []
    result = []
    for col in records[0].keys():
        parsed = sum(1 for row in records if to_float(row.get(col)) is not None)
        if parsed > len(records) * ratio:
            result.append(col)
    return result


def find_correlations(records: Sequence[Mapping[str, Any]], threshold: float = CORRELATION_THRESHOLD) -> Dict[str, Any]:
    """Pearson correlations between numeric columns with |r| >= threshold"""
    columns = numeric_columns(records)
    frame = pd.DataFrame({col: parse_floats(row.get(col) for row in records) for col in columns})

    correlations = []
    for i, first in enumerate(columns):
        for second in columns[i + 1:]:
            pair = frame[[first, second]].dropna()
            if len(pair) < 2:
                continue
            if pair[first].std() == 0 or pair[second].std() == 0:
                continue
            r = float(pair[first].corr(pair[second]))
            if not math.isnan(r) and abs(r) >= threshold:
                correlations.append({'column1': first, 'column2': second, 'correlation': round(r, 4)})

    correlations.sort(key=lambda c: abs(c['correlation']), reverse=True)
    return {
        'correlations': correlations,
        'numericColumns': columns,
        'threshold': threshold,
    }


def value_distributions(records: Sequence[Mapping[str, Any]], top_n: int = TOP_DISTRIBUTION_VALUES) -> Dict[str, Any]:
    """Most frequent values per column, with counts and percentages"""
    if not records:
        return {'distributions': {}}

    distributions = {}
    for col in records[0].keys():
        labels = pd.Series(['null' if v is None else str(v) for v in (row.get(col) for row in records)])
        counts = labels.value_counts(sort=True)
        total = len(labels)
        distributions[col] = [
            {
                'value': value,
                'count': int(count),
                'percentage': round(count / total * 100, 2),
            }
            for value, count in counts.head(top_n).items()
        ]
    return {'distributions': distributions}


def percent_change(previous: float, current: float) -> float:
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / abs(previous) * 100


def trend_direction(change: float, threshold: float = 5.0) -> str:
    if change > threshold:
        return 'increasing'
    if change < -threshold:
        return 'decreasing'
    return 'stable'


def compare_halves(values: Sequence[float]) -> Dict[str, Any]:
    """Compare the average of the second half of a series against the first half.

    The split is at ``n // 2``, so for odd lengths the second half holds the
    extra point. Changes beyond +-5% count as increasing/decreasing.
    """
    n = len(values)
    if n < 2:
        return {'firstHalfAverage': None, 'secondHalfAverage': None, 'growthRate': 0.0, 'direction': 'stable'}
    first, second = values[:n // 2], values[n // 2:]
    first_avg = sum(first) / len(first)
    second_avg = sum(second) / len(second)
    change = percent_change(first_avg, second_avg)
    return {
        'firstHalfAverage': first_avg,
        'secondHalfAverage': second_avg,
        'growthRate': change,
        'direction': trend_direction(change),
    }
