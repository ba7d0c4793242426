"""
Derived analysis entities
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ColumnStat:
    """Descriptive summary of one column"""
    name: str
    inferred_type: str  # "numeric", "text", "date", "boolean"
    count: int
    unique_count: int
    null_count: int
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None
    median: Optional[float] = None
    std_dev: Optional[float] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    avg_length: Optional[float] = None
    min_date: Optional[str] = None
    max_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'name': self.name,
            'inferredType': self.inferred_type,
            'count': self.count,
            'uniqueCount': self.unique_count,
            'nullCount': self.null_count,
        }
        if self.inferred_type == 'numeric':
            result.update({
                'min': self.min,
                'max': self.max,
                'mean': self.mean,
                'median': self.median,
                'stdDev': self.std_dev,
            })
        elif self.inferred_type in ('text', 'date'):
            result.update({
                'minLength': self.min_length,
                'maxLength': self.max_length,
                'avgLength': self.avg_length,
            })
            if self.inferred_type == 'date':
                result.update({'minDate': self.min_date, 'maxDate': self.max_date})
        return result


@dataclass(frozen=True)
class CustomerRFMRecord:
    """Recency/Frequency/Monetary profile of one customer"""
    customer_id: str
    recency_days: int
    frequency: int
    monetary_total: float
    r_score: int
    f_score: int
    m_score: int
    segment: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'customerId': self.customer_id,
            'recencyDays': self.recency_days,
            'frequency': self.frequency,
            'monetaryTotal': round(self.monetary_total, 2),
            'rScore': self.r_score,
            'fScore': self.f_score,
            'mScore': self.m_score,
            'segment': self.segment,
        }


@dataclass(frozen=True)
class CohortBucket:
    """Customers sharing a first-purchase month"""
    cohort_month: str
    customer_count: int
    cumulative_revenue: float

    @property
    def avg_revenue_per_customer(self) -> float:
        if not self.customer_count:
            return 0.0
        return self.cumulative_revenue / self.customer_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cohortMonth': self.cohort_month,
            'customerCount': self.customer_count,
            'cumulativeRevenue': round(self.cumulative_revenue, 2),
            'avgRevenuePerCustomer': round(self.avg_revenue_per_customer, 2),
        }


@dataclass(frozen=True)
class ForecastPoint:
    date: str
    predicted_revenue: float

    def to_dict(self) -> Dict[str, Any]:
        return {'date': self.date, 'predictedRevenue': round(self.predicted_revenue, 2)}
