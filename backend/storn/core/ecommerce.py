"""
E-commerce analytics: revenue, product performance, customer metrics and cohorts
"""
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

import pandas as pd

from storn.core.data_processing import is_blank, parse_dates, parse_revenues, to_float
from storn.core.models import CohortBucket
from storn.core.statistics import compare_halves

logger = logging.getLogger(__name__)

TOP_PRODUCTS = 10
BOTTOM_PRODUCTS = 5
TOP_CUSTOMERS = 10
MAX_COHORTS = 12
UNKNOWN_PRODUCT = 'Unknown'

Records = Sequence[Mapping[str, Any]]


def _column(records: Records, column: str):
    return [row.get(column) for row in records]


def entity_labels(values: Iterable[Any]) -> pd.Series:
    """Customer/product identifiers as stripped strings, None when blank"""
    return pd.Series([None if is_blank(v) else str(v).strip() for v in values], dtype=object)


def daily_revenue(records: Records, revenue_col: str, date_col: str) -> pd.Series:
    """Revenue summed per calendar day, indexed by day in ascending order.

    Rows whose date or revenue cannot be parsed are left out.
    """
    frame = pd.DataFrame({
        'date': parse_dates(_column(records, date_col)),
        'revenue': parse_revenues(_column(records, revenue_col)),
    }).dropna()
    if frame.empty:
        return pd.Series(dtype=float)
    return frame.groupby(frame['date'].dt.normalize())['revenue'].sum().sort_index()


def revenue_analytics(records: Records, revenue_col: str, date_col: str) -> Dict[str, Any]:
    revenues = parse_revenues(_column(records, revenue_col)).dropna()
    total_orders = int(len(revenues))
    total_revenue = float(revenues.sum())

    daily = daily_revenue(records, revenue_col, date_col)
    halves = compare_halves(daily.tolist())

    logger.info("Revenue analytics: %d orders over %d days", total_orders, len(daily))
    return {
        'totalRevenue': round(total_revenue, 2),
        'totalOrders': total_orders,
        'averageOrderValue': round(total_revenue / total_orders, 2) if total_orders else 0.0,
        'minOrder': round(float(revenues.min()), 2) if total_orders else 0.0,
        'maxOrder': round(float(revenues.max()), 2) if total_orders else 0.0,
        'trends': {
            'direction': halves['direction'],
            'growthRate': round(halves['growthRate'], 2),
            'dailySeries': [
                {'date': day.date().isoformat(), 'revenue': round(float(amount), 2)}
                for day, amount in daily.items()
            ],
        },
    }


def _quantity(value):
    parsed = to_float(value)
    return 1.0 if parsed is None else parsed


def _number(value: float):
    value = float(value)
    return int(value) if value.is_integer() else round(value, 2)


def _product_entry(name, row) -> Dict[str, Any]:
    orders = int(row['orders'])
    return {
        'product': name,
        'revenue': round(float(row['revenue']), 2),
        'orders': orders,
        'quantity': _number(row['quantity']),
        'averagePrice': round(float(row['revenue']) / orders, 2) if orders else 0.0,
    }


def product_performance(
    records: Records,
    product_col: str,
    revenue_col: str,
    quantity_col: Optional[str] = None,
) -> Dict[str, Any]:
    """Revenue, order count and units sold per product.

    Blank product names are grouped under "Unknown"; rows with unparseable
    revenue are skipped. Without a quantity column every order counts as one
    unit, and unparseable quantities also count as one.
    """
    frame = pd.DataFrame({
        'product': entity_labels(_column(records, product_col)).fillna(UNKNOWN_PRODUCT),
        'revenue': parse_revenues(_column(records, revenue_col)),
    })
    if quantity_col:
        frame['quantity'] = [_quantity(v) for v in _column(records, quantity_col)]
    else:
        frame['quantity'] = 1.0
    frame = frame.dropna(subset=['revenue'])

    grouped = frame.groupby('product', sort=False).agg(
        revenue=('revenue', 'sum'),
        orders=('revenue', 'size'),
        quantity=('quantity', 'sum'),
    ).sort_values('revenue', ascending=False, kind='stable')

    top = [_product_entry(name, row) for name, row in grouped.head(TOP_PRODUCTS).iterrows()]
    bottom = [_product_entry(name, row) for name, row in grouped.tail(BOTTOM_PRODUCTS).iloc[::-1].iterrows()]

    logger.info("Product performance computed for %d products", len(grouped))
    return {
        'totalProducts': int(len(grouped)),
        'totalRevenue': round(float(frame['revenue'].sum()), 2),
        'topProducts': top,
        'bottomProducts': bottom,
    }


def customer_metrics(records: Records, customer_col: str, revenue_col: str) -> Dict[str, Any]:
    frame = pd.DataFrame({
        'customer': entity_labels(_column(records, customer_col)),
        'revenue': parse_revenues(_column(records, revenue_col)),
    }).dropna()

    per_customer = frame.groupby('customer', sort=False)['revenue'].agg(['sum', 'size'])
    total = int(len(per_customer))
    new_customers = int((per_customer['size'] == 1).sum())
    returning = total - new_customers

    top = per_customer.sort_values('sum', ascending=False, kind='stable').head(TOP_CUSTOMERS)
    new_percent = round(new_customers / total * 100, 2) if total else 0.0
    returning_percent = round(returning / total * 100, 2) if total else 0.0
    return {
        'totalCustomers': total,
        'newCustomers': new_customers,
        'returningCustomers': returning,
        'newCustomerPercent': new_percent,
        'returningCustomerPercent': returning_percent,
        'averageCLV': round(float(per_customer['sum'].mean()), 2) if total else 0.0,
        # a repeat purchaser is a returning customer
        'repeatPurchaseRate': returning_percent,
        'topCustomers': [
            {
                'customer': customer,
                'revenue': round(float(row['sum']), 2),
                'orders': int(row['size']),
            }
            for customer, row in top.iterrows()
        ],
    }


def cohort_analysis(records: Records, customer_col: str, date_col: str, revenue_col: str) -> Dict[str, Any]:
    """Group customers by the month of their first valid purchase.

    A cohort's revenue is everything its customers ever spent, including rows
    whose own date is missing. Only the 12 most recent cohorts are returned,
    oldest first.
    """
    frame = pd.DataFrame({
        'customer': entity_labels(_column(records, customer_col)),
        'date': parse_dates(_column(records, date_col)),
        'revenue': parse_revenues(_column(records, revenue_col)),
    })

    dated = frame.dropna(subset=['customer', 'date'])
    if dated.empty:
        return {'cohorts': [], 'totalCohorts': 0}

    first_purchase = dated.groupby('customer')['date'].min()
    cohort_of = first_purchase.dt.strftime('%Y-%m')
    sizes = cohort_of.value_counts()

    spent = frame.dropna(subset=['customer', 'revenue'])
    spent = spent[spent['customer'].isin(cohort_of.index)]
    revenue_by_cohort = spent.groupby(spent['customer'].map(cohort_of))['revenue'].sum()

    buckets = [
        CohortBucket(
            cohort_month=month,
            customer_count=int(sizes[month]),
            cumulative_revenue=float(revenue_by_cohort.get(month, 0.0)),
        )
        for month in sorted(sizes.index)
    ]
    logger.info("Cohort analysis: %d cohorts", len(buckets))
    return {
        'cohorts': [b.to_dict() for b in buckets[-MAX_COHORTS:]],
        'totalCohorts': len(buckets),
    }
