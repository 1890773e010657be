"""
Shared system utilities.
"""
from inpatient.utils.helpers import (
    utcnow,
    to_utc,
    local_day_bounds,
    percentage,
    pagination_info,
)
from inpatient.utils.logger import configure_logging, logger

__all__ = [
    "utcnow",
    "to_utc",
    "local_day_bounds",
    "percentage",
    "pagination_info",
    "configure_logging",
    "logger",
]
