"""
E-commerce data cleaning rules
"""
import logging
import re
from typing import Any, Dict, List, Mapping, Sequence

from storn.core.columns import (
    CITY, COUNTRY, ORDER_STATUS, PAYMENT_METHOD, PRODUCT, SHIPPING_COST, VAT,
)
from storn.core.data_processing import is_blank, leading_float, to_float

logger = logging.getLogger(__name__)

SAUDI_PAYMENT_METHODS = frozenset(['STC Pay', 'تمارا', 'مدى', 'حوالة بنكية'])
DEFAULT_CITY = 'Riyadh'
DEFAULT_COUNTRY = 'Saudi Arabia'

NONE_SYNONYMS = frozenset(['none', 'zero', 'n/a', 'nil', 'na', '-'])
FREE_SHIPPING_SYNONYMS = NONE_SYNONYMS | {'free', 'مجاني'}

COMPLETED = 'Completed'
NOT_COMPLETED = 'Not Completed'
COMPLETED_TOKENS = frozenset(['تم التنفيذ', 'completed', 'delivered'])

_PRODUCT_NOISE = [
    re.compile(r'\s*-\s*\bSKU\b[:\s]*.*', re.IGNORECASE),
    re.compile(r'\s*\(\s*SKU\b[:\s]*.*?\)', re.IGNORECASE),
    re.compile(r'\s*\bSKU\b[:\s]*.*', re.IGNORECASE),
    re.compile(r'\s*\(\s*Qty\b[:\s]*.*?\)', re.IGNORECASE),
    re.compile(r'\s*\bQty\b[:\s]*.*', re.IGNORECASE),
    re.compile(r'[()]'),
    re.compile(r'[\'"]'),
    re.compile(r'(\s*-\s*\d+)+\s*$'),
]


def clean_product_name(value):
    """Strip SKU/quantity annotations, parentheses and quotes from a product name"""
    if not isinstance(value, str):
        return value
    for pattern in _PRODUCT_NOISE:
        value = pattern.sub('', value)
    return value.strip()


def clean_amount(value, synonyms=NONE_SYNONYMS):
    """Coerce a VAT/shipping cell to a number, falling back to 0.

    Text is read up to the first non-numeric character, so ``"15%"`` gives 15
    and ``"25 SAR"`` gives 25.
    """
    if is_blank(value) or isinstance(value, bool):
        return 0
    if isinstance(value, str):
        if value.strip().lower() in synonyms:
            return 0
        parsed = leading_float(value)
        return 0 if parsed is None else parsed
    if isinstance(value, (int, float)):
        return value if to_float(value) is not None else 0
    return 0


def clean_order_status(value):
    if isinstance(value, str) and value.strip().lower() in COMPLETED_TOKENS:
        return COMPLETED
    return NOT_COMPLETED


class DataCleaner:
    """
    Role-driven cleaning of e-commerce records.
    Each rule runs only when the roles it needs were detected; the input
    records are never modified.
    """

    def __init__(self, records: Sequence[Mapping[str, Any]], role_map: Mapping[str, str]):
        self.records = records
        self.roles = dict(role_map)

    def run(self) -> List[Dict[str, Any]]:
        cleaned = [self._clean_row(dict(row)) for row in self.records]
        logger.info("Cleaned %d records (rules: %s)", len(cleaned), ', '.join(self._active_rules()) or 'none')
        return cleaned

    def _active_rules(self):
        rules = []
        if self.roles.get(PRODUCT):
            rules.append('product')
        if self._can_default_location():
            rules.append('location')
        if self.roles.get(VAT):
            rules.append('vat')
        if self.roles.get(SHIPPING_COST):
            rules.append('shipping')
        if self.roles.get(ORDER_STATUS):
            rules.append('status')
        return rules

    def _can_default_location(self):
        return all(self.roles.get(r) for r in (PAYMENT_METHOD, CITY, COUNTRY))

    def _clean_row(self, row: Dict[str, Any]) -> Dict[str, Any]:
        product_col = self.roles.get(PRODUCT)
        if product_col and product_col in row:
            row[product_col] = clean_product_name(row[product_col])

        if self._can_default_location():
            self._default_location(row)

        vat_col = self.roles.get(VAT)
        if vat_col and vat_col in row:
            row[vat_col] = clean_amount(row[vat_col])

        shipping_col = self.roles.get(SHIPPING_COST)
        if shipping_col and shipping_col in row:
            row[shipping_col] = clean_amount(row[shipping_col], FREE_SHIPPING_SYNONYMS)

        status_col = self.roles.get(ORDER_STATUS)
        if status_col and status_col in row:
            row[status_col] = clean_order_status(row[status_col])

        return row

    def _default_location(self, row):
        method = row.get(self.roles[PAYMENT_METHOD])
        if not isinstance(method, str) or method.strip() not in SAUDI_PAYMENT_METHODS:
            return
        city_col, country_col = self.roles[CITY], self.roles[COUNTRY]
        if is_blank(row.get(city_col)) and is_blank(row.get(country_col)):
            row[city_col] = DEFAULT_CITY
            row[country_col] = DEFAULT_COUNTRY


def clean_records(records, role_map):
    return DataCleaner(records, role_map).run()
