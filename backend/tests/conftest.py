import pytest

from storn import create_app


@pytest.fixture
def app():
    return create_app({'TESTING': True, 'LOG_LEVEL': 'WARNING'})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def three_orders():
    return [
        {'date': '2024-01-01', 'customer': 'C1', 'revenue': '100'},
        {'date': '2024-01-02', 'customer': 'C1', 'revenue': '50'},
        {'date': '2024-01-03', 'customer': 'C2', 'revenue': '200'},
    ]


@pytest.fixture
def store_orders():
    """A small storefront export with noisy product names and mixed customers"""
    return [
        {'Order Date': '2024-01-05', 'Customer': 'Sara', 'Product': 'Coffee Beans - SKU: CB-100', 'Total': '120', 'Qty': '2'},
        {'Order Date': '2024-01-20', 'Customer': 'Omar', 'Product': 'Green Tea (Qty: 3)', 'Total': '45.5', 'Qty': '3'},
        {'Order Date': '2024-02-02', 'Customer': 'Sara', 'Product': 'Coffee Beans', 'Total': '60', 'Qty': '1'},
        {'Order Date': '2024-02-14', 'Customer': 'Lina', 'Product': 'Ceramic Mug', 'Total': '', 'Qty': '1'},
        {'Order Date': '2024-03-01', 'Customer': 'Omar', 'Product': '', 'Total': '80', 'Qty': 'two'},
        {'Order Date': '2024-03-09', 'Customer': 'Huda', 'Product': 'Green Tea', 'Total': 'refunded', 'Qty': '1'},
        {'Order Date': '2024-03-15', 'Customer': 'Sara', 'Product': 'Ceramic Mug', 'Total': '35', 'Qty': '1'},
    ]
