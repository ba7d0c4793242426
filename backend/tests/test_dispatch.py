import pytest

from storn.core.dispatch import ANALYSIS_TYPES, list_analysis_types, run_analysis

ECOMMERCE_TYPES = [key for key, analysis in ANALYSIS_TYPES.items() if analysis.ecommerce]


def test_revenue_end_to_end(three_orders):
    result = run_analysis(three_orders, 'ecommerce-revenue')

    assert result['totalRevenue'] == 350
    assert result['totalOrders'] == 3
    assert result['averageOrderValue'] == pytest.approx(116.67)
    assert result['analysisType'] == 'ecommerce-revenue'
    assert result['analysisName'] == 'Revenue Analytics'
    assert result['detectedColumns'] == {'date': 'date', 'revenue': 'revenue', 'customer': 'customer'}


@pytest.mark.parametrize('analysis_type', ECOMMERCE_TYPES)
def test_missing_columns_are_reported_not_raised(analysis_type):
    records = [{'note': 'hello', 'comment': 'world'}, {'note': 'again', 'comment': 'there'}]

    result = run_analysis(records, analysis_type)

    assert 'Could not detect required columns' in result['error']
    assert result['analysisType'] == analysis_type
    assert result['detectedColumns'] == {}


def test_products_are_cleaned_before_grouping(store_orders):
    result = run_analysis(store_orders, 'ecommerce-products')

    names = [p['product'] for p in result['topProducts']]
    assert names == ['Coffee Beans', 'Unknown', 'Green Tea', 'Ceramic Mug']
    assert result['topProducts'][0]['revenue'] == 180
    assert result['detectedColumns']['quantity'] == 'Qty'


def test_input_records_are_left_untouched(store_orders):
    before = [dict(row) for row in store_orders]

    run_analysis(store_orders, 'ecommerce-products')

    assert store_orders == before


def test_role_hints(three_orders):
    records = [{'when': r['date'], 'who': r['customer'], 'paid': r['revenue']} for r in three_orders]

    result = run_analysis(records, 'ecommerce-customers', role_hints={'customer': 'who', 'revenue': 'paid'})

    assert result['totalCustomers'] == 2
    assert result['detectedColumns']['customer'] == 'who'


def test_forecast_horizon_is_passed_through():
    records = [{'date': '2024-02-{:02d}'.format(d), 'revenue': str(100 + d)} for d in range(1, 11)]

    result = run_analysis(records, 'ecommerce-forecast', horizon=3)

    assert len(result['forecast']) == 3


def test_unknown_analysis_type():
    result = run_analysis([{'a': 1}], 'astrology')

    assert 'Unknown analysis type' in result['error']


@pytest.mark.parametrize('analysis_type', list(ANALYSIS_TYPES))
def test_every_analysis_handles_empty_input(analysis_type):
    result = run_analysis([], analysis_type)

    assert isinstance(result, dict)
    assert result['analysisType'] == analysis_type


def test_generic_analyses_need_no_roles(store_orders):
    result = run_analysis(store_orders, 'summary')

    assert result['rowCount'] == len(store_orders)
    assert 'error' not in result
    assert result['detectedColumns']['revenue'] == 'Total'


def test_huge_integers_do_not_break_analysis():
    records = [{'amount': 10 ** 400}, {'amount': 1}, {'amount': 2}]

    result = run_analysis(records, 'summary')

    assert 'error' not in result
    assert result['rowCount'] == 3


def test_list_analysis_types():
    types = {t['type']: t for t in list_analysis_types()}

    assert set(types) == set(ANALYSIS_TYPES)
    assert types['ecommerce-rfm']['requiredColumns'] == ['customer', 'date', 'revenue']
    assert types['quality']['requiredColumns'] == []
