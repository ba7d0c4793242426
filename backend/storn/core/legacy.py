"""
Generic analyzers that need no e-commerce roles: outliers, data quality and trends
"""
import logging
from typing import Any, Dict, List, Mapping, Sequence

import pandas as pd

from storn.core.columns import column_names
from storn.core.data_processing import cell_key, is_blank, to_float
from storn.core.statistics import column_values, compare_halves, infer_type

logger = logging.getLogger(__name__)

IQR_FACTOR = 1.5
MAX_SAMPLE_OUTLIERS = 10
MIN_TREND_POINTS = 4

Records = Sequence[Mapping[str, Any]]


def _numeric_column_values(records: Records) -> Dict[str, List[float]]:
    """Parsed values of each column the summarizer would call numeric, in row order"""
    if not records:
        return {}
    result = {}
    for col in records[0].keys():
        non_null = [v for v in column_values(records, col) if not is_blank(v)]
        if infer_type(col, non_null) != 'numeric':
            continue
        result[col] = [f for f in (to_float(v) for v in non_null) if f is not None]
    return result


def detect_outliers(records: Records) -> Dict[str, Any]:
    """IQR outliers per numeric column.

    Quartiles are read straight from the sorted values at positions
    floor(n * 0.25) and floor(n * 0.75), with no interpolation.
    """
    outliers = {}
    for col, values in _numeric_column_values(records).items():
        if not values:
            continue
        ordered = sorted(values)
        n = len(ordered)
        q1 = ordered[int(n * 0.25)]
        q3 = ordered[int(n * 0.75)]
        iqr = q3 - q1
        lower = q1 - IQR_FACTOR * iqr
        upper = q3 + IQR_FACTOR * iqr
        flagged = [v for v in values if v < lower or v > upper]
        outliers[col] = {
            'q1': q1,
            'q3': q3,
            'iqr': iqr,
            'lowerBound': lower,
            'upperBound': upper,
            'outlierCount': len(flagged),
            'outlierPercent': round(len(flagged) / n * 100, 2),
            'sampleOutliers': flagged[:MAX_SAMPLE_OUTLIERS],
        }

    logger.info("Outlier detection ran on %d numeric columns", len(outliers))
    return {'outliers': outliers, 'columnsAnalyzed': len(outliers)}


def data_quality(records: Records) -> Dict[str, Any]:
    """Missing/unique/duplicate counts per column plus dataset-level totals"""
    columns = column_names(records)
    total_rows = len(records)
    if not columns or not total_rows:
        return {
            'columns': [],
            'totalRows': total_rows,
            'totalColumns': len(columns),
            'totalMissing': 0,
            'completeness': 0.0,
            'duplicateRows': 0,
            'qualityScore': 0.0,
        }

    # Blank cells become None; lists and dicts become hashable keys
    df = pd.DataFrame(
        [[None if is_blank(row.get(col)) else cell_key(row.get(col)) for col in columns] for row in records],
        columns=columns,
        dtype=object,
    )
    missing = df.isnull().sum()
    present = df.notna().sum()
    unique = df.nunique(dropna=True)

    report = [
        {
            'column': col,
            'totalValues': total_rows,
            'missingCount': int(missing[col]),
            'missingPercent': round(int(missing[col]) / total_rows * 100, 2),
            'uniqueCount': int(unique[col]),
            'duplicateCount': int(present[col] - unique[col]),
        }
        for col in columns
    ]

    total_missing = int(missing.sum())
    duplicate_rows = int(df.duplicated().sum())
    missing_pct = total_missing / df.size * 100
    duplicate_pct = duplicate_rows / total_rows * 100

    return {
        'columns': report,
        'totalRows': total_rows,
        'totalColumns': len(columns),
        'totalMissing': total_missing,
        'completeness': round(100.0 - missing_pct, 2),
        'duplicateRows': duplicate_rows,
        'qualityScore': round(max(0.0, 100.0 - missing_pct - duplicate_pct), 2),
    }


def detect_trends(records: Records) -> Dict[str, Any]:
    trends = {}
    skipped = []
    for col, values in _numeric_column_values(records).items():
        if len(values) < MIN_TREND_POINTS:
            skipped.append(col)
            continue
        halves = compare_halves(values)
        trends[col] = {
            'firstHalfAverage': round(halves['firstHalfAverage'], 4),
            'secondHalfAverage': round(halves['secondHalfAverage'], 4),
            'changePercent': round(halves['growthRate'], 2),
            'direction': halves['direction'],
            'points': len(values),
        }

    if not trends:
        return {
            'error': 'Need at least {} numeric values in a column to detect trends'.format(MIN_TREND_POINTS),
            'trends': {},
        }
    return {'trends': trends, 'skippedColumns': skipped}
