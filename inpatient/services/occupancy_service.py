"""
Occupancy statistics.

Read-only aggregations over wards, beds and admissions. Every aggregation
reads inside a single transaction (REPEATABLE READ on PostgreSQL) so its
figures describe one consistent state.
"""
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional
from datetime import date
from sqlmodel import Session, select

from inpatient.models.ward import Ward
from inpatient.models.enums import OccupancyBandEnum, OCCUPANCY_BAND_THRESHOLDS
from inpatient.repositories.ward_repo import WardRepository
from inpatient.repositories.bed_repo import BedRepository
from inpatient.repositories.admission_repo import AdmissionRepository
from inpatient.utils.helpers import local_day_bounds, percentage


def occupancy_band(rate: float) -> OccupancyBandEnum:
    """
    Classifies an occupancy rate.

    Args:
        rate: Occupancy percentage (0-100)

    Returns:
        CRITICAL from 90, HIGH from 75, MEDIUM from 50, LOW below
    """
    for threshold, band in OCCUPANCY_BAND_THRESHOLDS:
        if rate >= threshold:
            return band
    return OccupancyBandEnum.LOW


class OccupancyService:
    """Statistics over the allocation state."""

    def __init__(self, session: Session):
        self.session = session
        self.ward_repo = WardRepository(session)
        self.bed_repo = BedRepository(session)
        self.admission_repo = AdmissionRepository(session)

    @contextmanager
    def _snapshot(self) -> Iterator[Session]:
        session = self.session
        opened = not session.in_transaction()
        if opened and session.get_bind().dialect.name == "postgresql":
            session.connection(execution_options={"isolation_level": "REPEATABLE READ"})
        try:
            yield session
        finally:
            if opened:
                session.rollback()

    def ward_occupancy(self) -> List[Dict[str, Any]]:
        """
        Occupancy of every ward, ordered by name.

        Returns:
            List of dicts with ward_id, name, type, capacity, occupied,
            rate and band
        """
        with self._snapshot() as session:
            wards = session.exec(select(Ward).order_by(Ward.name)).all()
            occupied = self.ward_repo.occupied_beds_by_ward()

            result = []
            for ward in wards:
                count = occupied.get(ward.id, 0)
                # Band uses the unrounded ratio
                exact = count / ward.capacity * 100 if ward.capacity else 0.0
                result.append({
                    "ward_id": ward.id,
                    "name": ward.name,
                    "type": ward.type,
                    "capacity": ward.capacity,
                    "occupied": count,
                    "rate": percentage(count, ward.capacity),
                    "band": occupancy_band(exact),
                })
            return result

    def ward_stats(self) -> Dict[str, Any]:
        with self._snapshot():
            total_capacity = self.ward_repo.total_capacity()
            total_occupancy = self.bed_repo.count_filtered(is_occupied=True)
            return {
                "total_wards": self.ward_repo.count(),
                "active_wards": self.ward_repo.count_active(),
                "wards_by_type": self.ward_repo.count_by_type(),
                "total_capacity": total_capacity,
                "total_occupancy": total_occupancy,
                "available_beds": self.bed_repo.count_filtered(is_occupied=False, is_active=True),
                "occupancy_rate": percentage(total_occupancy, total_capacity),
            }

    def bed_stats(self) -> Dict[str, Any]:
        """Bed counts; available means active and not occupied."""
        with self._snapshot():
            total = self.bed_repo.count()
            occupied = self.bed_repo.count_filtered(is_occupied=True)
            return {
                "total": total,
                "occupied": occupied,
                "available": self.bed_repo.count_filtered(is_occupied=False, is_active=True),
                "active": self.bed_repo.count_filtered(is_active=True),
                "by_type": self.bed_repo.count_by_type(),
                "by_ward": self.bed_repo.count_by_ward(),
                "occupancy_rate": percentage(occupied, total),
            }

    def admission_stats(self, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Admission counts and average length of stay.

        Args:
            today: Calendar day for `discharged_today`, in the configured
                timezone (defaults to the current day)
        """
        start, end = local_day_bounds(today)

        with self._snapshot():
            by_status = self.admission_repo.count_by_status()
            stays = self.admission_repo.get_closed_stays()

            average = 0.0
            if stays:
                seconds = sum((discharged - admitted).total_seconds() for admitted, discharged in stays)
                average = round(seconds / len(stays) / 86400, 2)

            return {
                "total": sum(by_status.values()),
                "current": by_status["ADMITTED"],
                "discharged_today": self.admission_repo.count_discharged_between(start, end),
                "by_status": by_status,
                "by_type": self.admission_repo.count_by_type(),
                "by_ward": self.admission_repo.count_current_by_ward(),
                "average_stay_days": average,
            }


OccupancyAggregator = OccupancyService
