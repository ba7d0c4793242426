"""
Analysis dispatch: detect roles, clean, run one analysis and tag the result
"""
import logging
from collections import namedtuple
from typing import Any, Dict, Mapping, Optional, Sequence

from storn.core import columns as roles
from storn.core.cleaning import clean_records
from storn.core.columns import detect_columns, missing_columns_error, missing_roles
from storn.core.data_processing import sanitize_for_json
from storn.core.ecommerce import cohort_analysis, customer_metrics, product_performance, revenue_analytics
from storn.core.forecasting import forecast_revenue
from storn.core.legacy import data_quality, detect_outliers, detect_trends
from storn.core.rfm import rfm_analysis
from storn.core.statistics import analyze_dataset, find_correlations, value_distributions

logger = logging.getLogger(__name__)

Analysis = namedtuple('Analysis', ['name', 'required', 'ecommerce', 'run'])


def _revenue(records, role_map, options):
    return revenue_analytics(records, role_map[roles.REVENUE], role_map[roles.DATE])


def _products(records, role_map, options):
    return product_performance(
        records, role_map[roles.PRODUCT], role_map[roles.REVENUE], role_map.get(roles.QUANTITY))


def _rfm(records, role_map, options):
    return rfm_analysis(records, role_map[roles.CUSTOMER], role_map[roles.DATE], role_map[roles.REVENUE])


def _customers(records, role_map, options):
    return customer_metrics(records, role_map[roles.CUSTOMER], role_map[roles.REVENUE])


def _cohorts(records, role_map, options):
    return cohort_analysis(records, role_map[roles.CUSTOMER], role_map[roles.DATE], role_map[roles.REVENUE])


def _forecast(records, role_map, options):
    return forecast_revenue(records, role_map[roles.DATE], role_map[roles.REVENUE], options.get('horizon'))


ANALYSIS_TYPES = {
    'ecommerce-revenue': Analysis('Revenue Analytics', (roles.REVENUE, roles.DATE), True, _revenue),
    'ecommerce-products': Analysis('Product Performance', (roles.PRODUCT, roles.REVENUE), True, _products),
    'ecommerce-rfm': Analysis('RFM Segmentation', (roles.CUSTOMER, roles.DATE, roles.REVENUE), True, _rfm),
    'ecommerce-customers': Analysis('Customer Metrics', (roles.CUSTOMER, roles.REVENUE), True, _customers),
    'ecommerce-cohorts': Analysis('Cohort Analysis', (roles.CUSTOMER, roles.DATE, roles.REVENUE), True, _cohorts),
    'ecommerce-forecast': Analysis('Revenue Forecast', (roles.DATE, roles.REVENUE), True, _forecast),
    'outliers': Analysis('Outlier Detection', (), False, lambda records, role_map, options: detect_outliers(records)),
    'trends': Analysis('Trend Analysis', (), False, lambda records, role_map, options: detect_trends(records)),
    'quality': Analysis('Data Quality', (), False, lambda records, role_map, options: data_quality(records)),
    'summary': Analysis('Statistical Summary', (), False, lambda records, role_map, options: analyze_dataset(records)),
    'correlation': Analysis('Correlation Analysis', (), False, lambda records, role_map, options: find_correlations(records)),
    'distribution': Analysis('Distribution Analysis', (), False, lambda records, role_map, options: value_distributions(records)),
}


def list_analysis_types():
    return [
        {'type': key, 'name': analysis.name, 'requiredColumns': list(analysis.required), 'ecommerce': analysis.ecommerce}
        for key, analysis in ANALYSIS_TYPES.items()
    ]


def run_analysis(
    records: Sequence[Mapping[str, Any]],
    analysis_type: str,
    role_hints: Optional[Mapping[str, str]] = None,
    horizon: Optional[Any] = None,
    sample_size: Optional[int] = None,
) -> Dict[str, Any]:
    """Run one analysis over the records and return a JSON-safe result.

    Failures (unknown type, undetectable columns, too little history) come
    back as an ``error`` field in the result; this never raises for bad data.
    Every result carries the ``detectedColumns`` role map that was used.
    """
    analysis = ANALYSIS_TYPES.get(analysis_type)
    if analysis is None:
        logger.warning("Unknown analysis type %r", analysis_type)
        return {'error': 'Unknown analysis type: {}'.format(analysis_type), 'analysisType': analysis_type}

    detect_kwargs = {'hints': role_hints}
    if sample_size:
        detect_kwargs['sample_size'] = sample_size
    role_map = detect_columns(records, **detect_kwargs)

    missing = missing_roles(role_map, analysis.required)
    if missing:
        logger.info("%s: missing required columns %s", analysis_type, missing)
        result = missing_columns_error(missing)
    else:
        data = clean_records(records, role_map) if analysis.ecommerce else records
        result = analysis.run(data, role_map, {'horizon': horizon})

    result.update({
        'analysisType': analysis_type,
        'analysisName': analysis.name,
        'detectedColumns': role_map,
    })
    return sanitize_for_json(result)
