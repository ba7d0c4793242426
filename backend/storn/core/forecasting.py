"""
Linear-trend revenue forecast over the daily revenue series
"""
import logging
from typing import Any, Dict, Mapping, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from storn.core.ecommerce import daily_revenue
from storn.core.models import ForecastPoint

logger = logging.getLogger(__name__)

MIN_HISTORY_DAYS = 7
DEFAULT_HORIZON = 30
MAX_HORIZON = 365


def clamp_horizon(horizon: Optional[Any], default: int = DEFAULT_HORIZON, maximum: int = MAX_HORIZON) -> int:
    """Coerce a requested horizon into 1..maximum, using the default when unset or invalid"""
    if horizon is None or isinstance(horizon, bool):
        return default
    try:
        value = int(horizon)
    except (TypeError, ValueError):
        return default
    return max(1, min(maximum, value))


def forecast_revenue(
    records: Sequence[Mapping[str, Any]],
    date_col: str,
    revenue_col: str,
    horizon: Optional[Any] = None,
) -> Dict[str, Any]:
    """Project daily revenue forward with a least-squares line.

    Day i of the history is x = i (0-based); forecast day k (1-based) sits at
    x = n + k - 1 and is dated k days after the last observed day.
    Predictions are never negative.
    """
    days = clamp_horizon(horizon)
    daily = daily_revenue(records, revenue_col, date_col)
    n = len(daily)
    if n < MIN_HISTORY_DAYS:
        logger.info("Forecast skipped: only %d days of history", n)
        return {'error': 'Need at least {} days of data for forecasting'.format(MIN_HISTORY_DAYS), 'forecast': []}

    x = np.arange(n, dtype=float)
    y = daily.to_numpy(dtype=float)
    fit = stats.linregress(x, y)
    slope = float(fit.slope)
    intercept = float(fit.intercept)
    r_value = float(fit.rvalue)

    if np.isclose(slope, 0.0):
        trend = 'stable'
    elif slope > 0:
        trend = 'increasing'
    else:
        trend = 'decreasing'

    mean_revenue = float(y.mean())
    growth_rate = slope / mean_revenue * 100 if mean_revenue else 0.0

    last_day = daily.index[-1]
    forecast = [
        ForecastPoint(
            date=(last_day + pd.Timedelta(days=k)).date().isoformat(),
            predicted_revenue=max(0.0, slope * (n + k - 1) + intercept),
        ).to_dict()
        for k in range(1, days + 1)
    ]

    logger.info("Forecast: %d days ahead from %d days of history (%s)", days, n, trend)
    return {
        'trend': trend,
        'growthRate': round(growth_rate, 2),
        'forecast': forecast,
        'slope': round(slope, 4),
        'intercept': round(intercept, 4),
        # constant history gives an undefined r, treated as no fit
        'rSquared': round(r_value ** 2, 4) if np.isfinite(r_value) else 0.0,
        'historicalDays': n,
    }
