import pytest

from storn.core.legacy import data_quality, detect_outliers, detect_trends


def test_iqr_outliers():
    records = [{'amount': v, 'label': 'Coffee'} for v in [1, 2, 3, 4, 5, 100]]

    result = detect_outliers(records)['outliers']

    assert list(result) == ['amount']
    amount = result['amount']
    assert amount['q1'] == 2
    assert amount['q3'] == 5
    assert amount['lowerBound'] == pytest.approx(-2.5)
    assert amount['upperBound'] == pytest.approx(9.5)
    assert amount['outlierCount'] == 1
    assert amount['sampleOutliers'] == [100]


def test_sample_outliers_are_capped():
    values = [10] * 50 + [1000 + i for i in range(15)]
    records = [{'amount': v} for v in values]

    result = detect_outliers(records)['outliers']['amount']

    assert result['outlierCount'] == 15
    assert len(result['sampleOutliers']) == 10


def test_quality_counts_per_column():
    records = [{'col': v} for v in ['a', '', 'b', None, 'a']]

    column = data_quality(records)['columns'][0]

    assert column['column'] == 'col'
    assert column['totalValues'] == 5
    assert column['missingCount'] == 2
    assert column['missingPercent'] == 40.0
    assert column['uniqueCount'] == 2
    assert column['duplicateCount'] == 1


def test_quality_dataset_totals():
    records = [{'a': 1, 'b': 2}, {'a': 1, 'b': 2}, {'a': 3, 'b': None}]

    result = data_quality(records)

    assert result['totalRows'] == 3
    assert result['totalMissing'] == 1
    assert result['duplicateRows'] == 1
    assert result['completeness'] == pytest.approx(83.33)
    # 100 - 16.67% missing cells - 33.33% duplicate rows
    assert result['qualityScore'] == pytest.approx(50.0)


def test_quality_on_empty_dataset():
    result = data_quality([])

    assert result['columns'] == []
    assert result['qualityScore'] == 0.0


def test_quality_handles_list_cells_and_mixed_blanks():
    records = [
        {'tags': ['x'], 'note': ''},
        {'tags': ['x'], 'note': None},
        {'tags': ['y'], 'note': 'gift'},
    ]

    result = data_quality(records)
    columns = {c['column']: c for c in result['columns']}

    assert columns['tags']['uniqueCount'] == 2
    assert columns['tags']['duplicateCount'] == 1
    assert columns['note']['missingCount'] == 2
    # an empty string and a null are both missing, so the first two rows match
    assert result['duplicateRows'] == 1
    assert result['totalMissing'] == 2


def test_trends_per_numeric_column():
    records = [
        {'sales': 10, 'cost': 50, 'refunds': 1},
        {'sales': 10, 'cost': 50, 'refunds': 2},
        {'sales': 20, 'cost': 20, 'refunds': None},
        {'sales': 20, 'cost': 20, 'refunds': None},
    ]

    result = detect_trends(records)

    assert result['trends']['sales']['direction'] == 'increasing'
    assert result['trends']['sales']['changePercent'] == pytest.approx(100.0)
    assert result['trends']['cost']['direction'] == 'decreasing'
    assert result['skippedColumns'] == ['refunds']


def test_trends_need_four_values():
    result = detect_trends([{'sales': 1}, {'sales': 2}])

    assert result['trends'] == {}
    assert 'error' in result
