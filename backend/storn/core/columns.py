"""
Column semantics detection

Maps semantic roles (revenue, date, customer, ...) to concrete column names
using bilingual (Latin/Arabic) name keywords, with content sniffing as a
fallback for revenue and date columns.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from storn.core.data_processing import is_blank, parse_dates, to_float

logger = logging.getLogger(__name__)

REVENUE = 'revenue'
DATE = 'date'
CUSTOMER = 'customer'
PRODUCT = 'product'
QUANTITY = 'quantity'
CITY = 'city'
COUNTRY = 'country'
VAT = 'vat'
SHIPPING_COST = 'shippingCost'
ORDER_STATUS = 'orderStatus'
PAYMENT_METHOD = 'paymentMethod'

ALL_ROLES = (
    REVENUE, DATE, CUSTOMER, PRODUCT, QUANTITY, CITY, COUNTRY,
    VAT, SHIPPING_COST, ORDER_STATUS, PAYMENT_METHOD,
)

# Most specific roles first: "Total Shipping" belongs to shippingCost, not revenue
RESOLUTION_ORDER = (
    DATE, SHIPPING_COST, VAT, ORDER_STATUS, PAYMENT_METHOD, CITY, COUNTRY,
    REVENUE, QUANTITY, CUSTOMER, PRODUCT,
)

DEFAULT_SAMPLE_SIZE = 100
NUMERIC_SNIFF_RATIO = 0.8
DATE_SNIFF_RATIO = 0.7

# identifier-like headers are never sniffed as amounts
_IDENTIFIER_NAME = re.compile(r'(^|[\s_\-])(id|no|number|code|phone|zip)$|رقم', re.IGNORECASE)

DEFAULT_ROLE_KEYWORDS = {
    DATE: ('order date', 'date', 'تاريخ', 'created', 'ordered', 'purchased', 'timestamp'),
    SHIPPING_COST: ('shipping cost', 'shipping', 'delivery fee', 'freight', 'الشحن', 'التوصيل'),
    VAT: ('vat', 'tax', 'الضريبة', 'ضريبة'),
    ORDER_STATUS: ('order status', 'status', 'حالة'),
    PAYMENT_METHOD: ('payment method', 'payment', 'طريقة الدفع', 'الدفع'),
    CITY: ('city', 'المدينة', 'مدينة'),
    COUNTRY: ('country', 'الدولة', 'دولة'),
    REVENUE: ('revenue', 'order total', 'total', 'amount', 'sales', 'price', 'value',
              'اجمالي', 'إجمالي', 'المبلغ', 'سعر'),
    QUANTITY: ('quantity', 'qty', 'units', 'pieces', 'كمية', 'الكمية', 'عدد'),
    CUSTOMER: ('customer', 'client', 'buyer', 'user', 'عميل', 'العميل', 'زبون'),
    PRODUCT: ('product', 'item', 'sku', 'منتج', 'المنتج', 'اسماء', 'name'),
}

# Column headers of the Arabic storefront export, matched exactly
DEFAULT_EXACT_NAMES = {
    'تاريخ الطلب': DATE,
    'اجمالي الطلب': REVENUE,
    'اسماء المنتجات مع SKU': PRODUCT,
    'اسم المنتج': PRODUCT,
    'طريقة الدفع': PAYMENT_METHOD,
    'الضريبة': VAT,
    'المدينة': CITY,
    'الدولة': COUNTRY,
    'حالة الطلب': ORDER_STATUS,
    'تكلفة الشحن': SHIPPING_COST,
    'اسم العميل': CUSTOMER,
}


@dataclass(frozen=True)
class ColumnPatterns:
    """Immutable keyword tables driving column detection"""
    role_keywords: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_ROLE_KEYWORDS))
    exact_names: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_EXACT_NAMES))
    resolution_order: Tuple[str, ...] = RESOLUTION_ORDER

    def keywords_for(self, role: str) -> Tuple[str, ...]:
        return tuple(k.lower() for k in self.role_keywords.get(role, ()))


DEFAULT_PATTERNS = ColumnPatterns()


def column_names(records: Sequence[Mapping[str, Any]]) -> List[str]:
    """Column names in first-seen order across the given records"""
    seen = {}
    for row in records:
        for key in row:
            if key not in seen:
                seen[key] = True
    return list(seen)


def _sample_values(sample, column):
    return [row.get(column) for row in sample if not is_blank(row.get(column))]


def _looks_numeric(values) -> bool:
    if not values:
        return False
    parsed = sum(1 for v in values if to_float(v) is not None)
    return parsed / len(values) >= NUMERIC_SNIFF_RATIO


def _looks_like_dates(values) -> bool:
    if not values:
        return False
    parsed = int(parse_dates(values).notna().sum())
    return parsed / len(values) >= DATE_SNIFF_RATIO


_SNIFFERS = {
    REVENUE: _looks_numeric,
    DATE: _looks_like_dates,
}


def detect_columns(
    records: Sequence[Mapping[str, Any]],
    roles: Optional[Iterable[str]] = None,
    patterns: ColumnPatterns = DEFAULT_PATTERNS,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    hints: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Detect which column plays each semantic role.

    Args:
        records: the dataset (only the first ``sample_size`` rows are inspected)
        roles: roles to detect, defaults to every known role
        patterns: keyword tables
        sample_size: number of leading rows used for detection
        hints: caller-supplied partial role map; hinted roles skip detection

    Returns:
        A partial ColumnRoleMap; undetected roles are absent.
    """
    sample = list(records[:max(1, sample_size)])
    columns = column_names(sample)
    wanted = set(ALL_ROLES if roles is None else roles)
    detected: Dict[str, str] = {}
    claimed = set()

    for role, column in (hints or {}).items():
        if role not in ALL_ROLES:
            logger.warning("Ignoring hint for unknown role %r", role)
            continue
        if column not in columns:
            logger.warning("Ignoring hint %s=%r: no such column", role, column)
            continue
        detected[role] = column
        claimed.add(column)

    if not columns:
        return detected

    for column in columns:
        role = patterns.exact_names.get(column.strip())
        if role in wanted and role not in detected and column not in claimed:
            detected[role] = column
            claimed.add(column)

    for role in patterns.resolution_order:
        if role not in wanted or role in detected:
            continue
        match = _match_by_name(role, columns, claimed, patterns)
        if match is not None:
            detected[role] = match
            claimed.add(match)

    for role, sniff in _SNIFFERS.items():
        if role not in wanted or role in detected:
            continue
        for column in columns:
            if column in claimed:
                continue
            if role == REVENUE and _IDENTIFIER_NAME.search(column.strip()):
                continue
            if sniff(_sample_values(sample, column)):
                logger.info("Detected %s column %r from its values", role, column)
                detected[role] = column
                claimed.add(column)
                break

    logger.info("Detected columns: %s", detected)
    return detected


def _match_by_name(role, columns, claimed, patterns):
    lowered = [(c, c.lower()) for c in columns if c not in claimed]
    for keyword in patterns.keywords_for(role):
        for column, name in lowered:
            if keyword in name:
                return column
    return None


def missing_roles(role_map: Mapping[str, str], required: Iterable[str]) -> List[str]:
    return [role for role in required if not role_map.get(role)]


def missing_columns_error(missing: Sequence[str]) -> Dict[str, str]:
    """Result-level detection failure naming the undetected roles"""
    return {
        'error': 'Could not detect required columns: {}. Please make sure the data has '
                 '{} columns.'.format(', '.join(missing), ' and '.join(missing)),
    }
