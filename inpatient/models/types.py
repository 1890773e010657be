"""
Custom column types.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, TypeDecorator

from inpatient.utils.helpers import to_utc


class UTCDateTime(TypeDecorator):
    """
    Timestamp stored and returned as aware UTC.

    SQLite keeps no offset, so values read back without one are UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        return to_utc(value)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        return to_utc(value)
