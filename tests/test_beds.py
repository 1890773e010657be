"""
Tests for bed endpoints.
"""
from fastapi import status

from inpatient.models.enums import BedTypeEnum
from inpatient.services.allocation_service import AllocationService


class TestBedRegistration:
    """Tests for bed creation."""

    def test_create_bed(self, client, create_ward):
        ward = create_ward()

        response = client.post("/api/beds", json={
            "ward_id": ward.id,
            "bed_number": " 12 ",
            "bed_type": "ISOLATION",
        })
        assert response.status_code == status.HTTP_201_CREATED

        data = response.json()
        assert data["bed_number"] == "12"
        assert data["bed_type"] == "ISOLATION"
        assert data["is_occupied"] is False
        assert data["is_active"] is True
        assert data["ward_name"] == "General-A"

    def test_beds_beyond_capacity_can_be_registered(self, client, create_ward):
        ward = create_ward(capacity=1)

        for number in ("1", "2"):
            response = client.post("/api/beds", json={"ward_id": ward.id, "bed_number": number})
            assert response.status_code == status.HTTP_201_CREATED

    def test_create_bed_in_inactive_ward(self, client, create_ward):
        ward = create_ward(is_active=False)

        response = client.post("/api/beds", json={"ward_id": ward.id, "bed_number": "1"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["details"]["fields"] == ["ward_id"]

    def test_create_bed_in_unknown_ward(self, client):
        response = client.post("/api/beds", json={"ward_id": "missing", "bed_number": "1"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["details"]["fields"] == ["ward_id"]

    def test_create_bed_duplicate_number(self, client, ward_with_beds):
        ward = ward_with_beds["ward"]

        response = client.post("/api/beds", json={"ward_id": ward.id, "bed_number": "B1"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["details"]["fields"] == ["bed_number"]

    def test_same_number_in_other_ward(self, client, ward_with_beds, create_ward):
        other = create_ward(name="General-B")

        response = client.post("/api/beds", json={"ward_id": other.id, "bed_number": "B1"})
        assert response.status_code == status.HTTP_201_CREATED

    def test_create_bed_empty_number(self, client, create_ward):
        ward = create_ward()

        response = client.post("/api/beds", json={"ward_id": ward.id, "bed_number": "  "})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["details"]["fields"] == ["bed_number"]


class TestBedQueries:
    """Tests for bed reads."""

    def test_get_bed(self, client, ward_with_beds):
        bed = ward_with_beds["beds"][0]

        response = client.get(f"/api/beds/{bed.id}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["bed_number"] == "B1"

    def test_get_bed_not_found(self, client):
        response = client.get("/api/beds/missing")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_available_beds_ordering(self, client, create_ward, create_bed):
        """Ordered by ward name, then natural bed number."""
        icu = create_ward(name="ICU-1")
        general = create_ward(name="General-A", capacity=20)
        create_bed(icu.id, bed_number="1")
        for number in ("10", "2", "1"):
            create_bed(general.id, bed_number=number)

        response = client.get("/api/beds/available")
        assert response.status_code == status.HTTP_200_OK
        assert [(b["ward_name"], b["bed_number"]) for b in response.json()] == [
            ("General-A", "1"),
            ("General-A", "2"),
            ("General-A", "10"),
            ("ICU-1", "1"),
        ]

    def test_available_beds_excludes_taken(self, client, ward_with_beds, create_bed, admit):
        ward = ward_with_beds["ward"]
        b1, b2 = ward_with_beds["beds"]
        create_bed(ward.id, bed_number="B3", is_active=False)
        admit("P1", ward.id, b1.id)

        response = client.get("/api/beds/available", params={"ward_id": ward.id})
        assert [b["id"] for b in response.json()] == [b2.id]

    def test_available_beds_by_type(self, client, create_ward, create_bed):
        ward = create_ward(capacity=5)
        create_bed(ward.id, bed_number="1")
        isolation = create_bed(ward.id, bed_number="2", bed_type=BedTypeEnum.ISOLATION)

        response = client.get("/api/beds/available", params={"bed_type": "ISOLATION"})
        assert [b["id"] for b in response.json()] == [isolation.id]

    def test_list_beds_filters(self, client, ward_with_beds, admit):
        ward = ward_with_beds["ward"]
        admit("P1", ward.id, ward_with_beds["beds"][0].id)

        response = client.get("/api/beds", params={"ward_id": ward.id, "is_occupied": True})
        data = response.json()
        assert data["pagination"]["total_items"] == 1
        assert data["items"][0]["bed_number"] == "B1"


class TestBedMaintenance:
    """Tests for bed edition and deletion."""

    def test_update_bed(self, client, ward_with_beds):
        bed = ward_with_beds["beds"][0]

        response = client.put(f"/api/beds/{bed.id}", json={"bed_type": "ICU", "notes": "Monitor"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["bed_type"] == "ICU"
        assert response.json()["notes"] == "Monitor"

    def test_update_occupancy_not_allowed(self, client, ward_with_beds):
        """Occupancy only changes through admissions."""
        bed = ward_with_beds["beds"][0]

        response = client.put(f"/api/beds/{bed.id}", json={"is_occupied": True})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_renumber_to_taken_number(self, client, ward_with_beds):
        bed = ward_with_beds["beds"][0]

        response = client.put(f"/api/beds/{bed.id}", json={"bed_number": "B2"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_deactivate_occupied_bed_fails(self, client, ward_with_beds, admit):
        ward = ward_with_beds["ward"]
        bed = ward_with_beds["beds"][0]
        admit("P1", ward.id, bed.id)

        response = client.put(f"/api/beds/{bed.id}", json={"is_active": False})
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["details"]["kind"] == "BED_IN_USE"

    def test_delete_bed(self, client, ward_with_beds):
        bed = ward_with_beds["beds"][0]
        bed_id = bed.id

        response = client.delete(f"/api/beds/{bed_id}")
        assert response.status_code == status.HTTP_200_OK

        response = client.get(f"/api/beds/{bed_id}")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_occupied_bed_fails(self, client, ward_with_beds, admit):
        ward = ward_with_beds["ward"]
        bed = ward_with_beds["beds"][0]
        admit("P1", ward.id, bed.id)

        response = client.delete(f"/api/beds/{bed.id}")
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["details"]["activeAdmissions"] == 1

    def test_delete_bed_with_history_fails(self, client, session, ward_with_beds, admit):
        ward = ward_with_beds["ward"]
        bed = ward_with_beds["beds"][0]
        admission = admit("P1", ward.id, bed.id)
        AllocationService(session).discharge_patient(admission.id)

        response = client.delete(f"/api/beds/{bed.id}")
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["details"]["allAdmissions"] == 1
