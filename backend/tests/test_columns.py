from storn.core.columns import (
    ColumnPatterns, column_names, detect_columns, missing_columns_error, missing_roles,
)


def test_detects_english_headers():
    records = [{
        'Order Date': '2024-01-01',
        'Customer Name': 'Sara',
        'Product': 'Coffee',
        'Total': '100',
        'Qty': '2',
        'Shipping Cost': '15',
        'Status': 'delivered',
    }]

    roles = detect_columns(records)

    assert roles['date'] == 'Order Date'
    assert roles['customer'] == 'Customer Name'
    assert roles['product'] == 'Product'
    assert roles['quantity'] == 'Qty'
    assert roles['shippingCost'] == 'Shipping Cost'
    assert roles['orderStatus'] == 'Status'
    # "Total" is left for revenue, not taken by shipping
    assert roles['revenue'] == 'Total'
    assert 'city' not in roles


def test_detects_arabic_storefront_headers():
    records = [{
        'تاريخ الطلب': '2024-01-01',
        'اجمالي الطلب': '250',
        'اسماء المنتجات مع SKU': 'قهوة',
        'اسم العميل': 'سارة',
        'طريقة الدفع': 'مدى',
        'المدينة': '',
        'الدولة': '',
        'الضريبة': '15',
        'حالة الطلب': 'تم التنفيذ',
        'تكلفة الشحن': 'مجاني',
    }]

    roles = detect_columns(records)

    assert roles == {
        'date': 'تاريخ الطلب',
        'revenue': 'اجمالي الطلب',
        'product': 'اسماء المنتجات مع SKU',
        'customer': 'اسم العميل',
        'paymentMethod': 'طريقة الدفع',
        'city': 'المدينة',
        'country': 'الدولة',
        'vat': 'الضريبة',
        'orderStatus': 'حالة الطلب',
        'shippingCost': 'تكلفة الشحن',
    }


def test_sniffs_revenue_and_date_from_values():
    records = [
        {'col_a': '2024-01-05', 'col_b': '99.5'},
        {'col_a': '2024-01-06', 'col_b': '12'},
        {'col_a': '2024-01-07', 'col_b': '40.25'},
    ]

    roles = detect_columns(records, roles=['revenue', 'date'])

    assert roles == {'revenue': 'col_b', 'date': 'col_a'}


def test_identifier_columns_are_not_sniffed_as_revenue():
    records = [{'order_id': '1001', 'note': 'hello'}, {'order_id': '1002', 'note': 'world'}]

    roles = detect_columns(records, roles=['revenue'])

    assert 'revenue' not in roles


def test_hints_override_detection():
    records = [{'Amount Paid': '10', 'Total': '12', 'When': '2024-01-01'}]

    roles = detect_columns(records, hints={'revenue': 'Amount Paid', 'date': 'When', 'customer': 'Nope'})

    assert roles['revenue'] == 'Amount Paid'
    assert roles['date'] == 'When'
    assert 'customer' not in roles


def test_only_leading_sample_is_inspected():
    records = [{'note': 'hello'}, {'note': 'world', 'Revenue': '5'}]

    assert 'revenue' not in detect_columns(records, sample_size=1)
    assert detect_columns(records, sample_size=2)['revenue'] == 'Revenue'


def test_custom_patterns():
    patterns = ColumnPatterns(role_keywords={'revenue': ('betrag',)}, exact_names={})
    records = [{'Betrag': '10', 'Total': '3'}]

    assert detect_columns(records, roles=['revenue'], patterns=patterns) == {'revenue': 'Betrag'}


def test_empty_records_detect_nothing():
    assert detect_columns([]) == {}


def test_column_names_keep_first_seen_order():
    assert column_names([{'b': 1, 'a': 2}, {'c': 3, 'a': 4}]) == ['b', 'a', 'c']


def test_missing_roles_error_names_roles():
    missing = missing_roles({'revenue': 'Total'}, ['revenue', 'date', 'customer'])

    assert missing == ['date', 'customer']
    message = missing_columns_error(missing)['error']
    assert 'date' in message and 'customer' in message


def test_leftmost_column_wins_a_keyword_tie():
    records = [{'Total A': '10', 'Total B': '20'}]

    assert detect_columns(records, roles=['revenue']) == {'revenue': 'Total A'}


def test_earlier_keyword_beats_column_position():
    records = [{'Amount': '10', 'Revenue': '20'}]

    assert detect_columns(records, roles=['revenue']) == {'revenue': 'Revenue'}


def _column(values):
    return [{'col_x': v} for v in values]


def test_numeric_sniffing_needs_eighty_percent():
    four_of_five = _column(['1', '2', '3', '4', 'hello'])
    three_of_five = _column(['1', '2', '3', 'hello', 'world'])

    assert detect_columns(four_of_five, roles=['revenue']) == {'revenue': 'col_x'}
    assert detect_columns(three_of_five, roles=['revenue']) == {}


def test_date_sniffing_needs_seventy_percent():
    dates = ['2024-01-{:02d}'.format(day) for day in range(1, 8)]
    seven_of_ten = _column(dates + ['hello', 'world', 'again'])
    six_of_ten = _column(dates[:6] + ['hello', 'world', 'again', 'there'])

    assert detect_columns(seven_of_ten, roles=['date']) == {'date': 'col_x'}
    assert detect_columns(six_of_ten, roles=['date']) == {}


def test_blank_cells_do_not_count_against_sniffing():
    records = _column(['5', '', None, '7.5'])

    assert detect_columns(records, roles=['revenue']) == {'revenue': 'col_x'}
