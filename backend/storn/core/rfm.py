"""
RFM (Recency, Frequency, Monetary) customer segmentation
"""
import logging
from typing import Any, Dict, Mapping, Sequence

import numpy as np
import pandas as pd

from storn.core.data_processing import parse_dates, parse_revenues
from storn.core.ecommerce import entity_labels
from storn.core.models import CustomerRFMRecord

logger = logging.getLogger(__name__)

MAX_CUSTOMERS = 100
QUINTILES = 5

OTHER = 'Other'

# First matching rule wins
SEGMENT_RULES = (
    ('Champions', lambda r, f, m: r >= 4 and f >= 4 and m >= 4),
    ('Loyal Customers', lambda r, f, m: f >= 4 and m >= 3),
    ('Big Spenders', lambda r, f, m: m >= 4),
    ('New Customers', lambda r, f, m: r >= 4 and f <= 2),
    ('At Risk', lambda r, f, m: r <= 2 and f >= 3),
    ('Lost Customers', lambda r, f, m: r <= 2 and f <= 2 and m <= 2),
)

SEGMENTS = tuple(name for name, _ in SEGMENT_RULES) + (OTHER,)


def assign_segment(r: int, f: int, m: int) -> str:
    for name, rule in SEGMENT_RULES:
        if rule(r, f, m):
            return name
    return OTHER


def quintile_scores(values: pd.Series, ascending: bool = True) -> pd.Series:
    """Score each value 1..5 by its rank in the population.

    Equal inputs always get equal scores. Ascending, a tied group takes its
    lowest rank. With ``ascending=False`` smaller values score higher and a
    tied group takes its highest rank, so values tied at the minimum all
    score 5.
    """
    n = len(values)
    if n == 0:
        return pd.Series(dtype=int)
    ranks = values.rank(method='min' if ascending else 'max', ascending=ascending)
    return np.ceil(ranks * QUINTILES / n).clip(1, QUINTILES).astype(int)


def rfm_analysis(records: Sequence[Mapping[str, Any]], customer_col: str, date_col: str, revenue_col: str) -> Dict[str, Any]:
    frame = pd.DataFrame({
        'customer': entity_labels(row.get(customer_col) for row in records),
        'date': parse_dates([row.get(date_col) for row in records]),
        'revenue': parse_revenues([row.get(revenue_col) for row in records]),
    }).dropna()

    if frame.empty:
        return {
            'customers': [],
            'segmentCounts': {},
            'segmentRevenue': {},
            'totalCustomers': 0,
            'referenceDate': None,
        }

    frame['day'] = frame['date'].dt.normalize()
    reference = frame['day'].max()

    per_customer = frame.groupby('customer', sort=False).agg(
        last_order=('day', 'max'),
        frequency=('revenue', 'size'),
        monetary=('revenue', 'sum'),
    )
    per_customer['recency'] = (reference - per_customer['last_order']).dt.days
    # fewer days since the last order ranks higher
    per_customer['r'] = quintile_scores(per_customer['recency'], ascending=False)
    per_customer['f'] = quintile_scores(per_customer['frequency'])
    per_customer['m'] = quintile_scores(per_customer['monetary'])
    per_customer['segment'] = [
        assign_segment(r, f, m)
        for r, f, m in zip(per_customer['r'], per_customer['f'], per_customer['m'])
    ]

    segment_counts = per_customer['segment'].value_counts()
    segment_revenue = per_customer.groupby('segment')['monetary'].sum()

    ranked = per_customer.sort_values('monetary', ascending=False, kind='stable')
    customers = [
        CustomerRFMRecord(
            customer_id=customer,
            recency_days=int(row['recency']),
            frequency=int(row['frequency']),
            monetary_total=float(row['monetary']),
            r_score=int(row['r']),
            f_score=int(row['f']),
            m_score=int(row['m']),
            segment=row['segment'],
        ).to_dict()
        for customer, row in ranked.head(MAX_CUSTOMERS).iterrows()
    ]

    logger.info("RFM segmentation: %d customers in %d segments", len(per_customer), len(segment_counts))
    return {
        'customers': customers,
        'segmentCounts': {name: int(segment_counts[name]) for name in SEGMENTS if name in segment_counts},
        'segmentRevenue': {name: round(float(segment_revenue[name]), 2) for name in SEGMENTS if name in segment_revenue},
        'totalCustomers': int(len(per_customer)),
        'referenceDate': reference.date().isoformat(),
    }
