"""
Tests for ward endpoints.
"""
import pytest
from fastapi import status
from sqlmodel import select

from inpatient.models.admission import Admission
from inpatient.models.bed import Bed
from inpatient.models.ward import Ward
from inpatient.models.enums import WardTypeEnum


class TestWardCreation:
    """Tests for ward creation."""

    def test_create_ward(self, client):
        response = client.post("/api/wards", json={
            "name": "  ICU-1 ",
            "type": "ICU",
            "capacity": 4,
            "floor": "3",
        })
        assert response.status_code == status.HTTP_201_CREATED

        data = response.json()
        assert data["name"] == "ICU-1"
        assert data["type"] == "ICU"
        assert data["capacity"] == 4
        assert data["is_active"] is True
        assert data["total_beds"] == 0
        assert data["effective_daily_rate"] == 5000

    def test_create_ward_with_beds(self, client, session):
        """provision_beds creates one bed per capacity slot."""
        response = client.post("/api/wards", json={
            "name": "Private-1",
            "type": "PRIVATE",
            "capacity": 3,
            "daily_rate": "4500.00",
            "provision_beds": True,
        })
        assert response.status_code == status.HTTP_201_CREATED

        data = response.json()
        assert data["total_beds"] == 3
        assert data["effective_daily_rate"] == 4500

        beds = session.exec(select(Bed).where(Bed.ward_id == data["id"])).all()
        assert sorted(b.bed_number for b in beds) == ["1", "2", "3"]
        assert {b.bed_type.value for b in beds} == {"PRIVATE"}

    @pytest.mark.parametrize("capacity", [0, -1, 1001])
    def test_create_ward_invalid_capacity(self, client, capacity):
        response = client.post("/api/wards", json={"name": "X", "type": "GENERAL", "capacity": capacity})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

        data = response.json()
        assert data["error"] == "VALIDATION_ERROR"
        assert "capacity" in data["details"]["fields"]

    def test_create_ward_empty_name(self, client):
        response = client.post("/api/wards", json={"name": "   ", "type": "GENERAL", "capacity": 2})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["details"]["fields"] == ["name"]

    def test_create_ward_duplicate_name(self, client, create_ward):
        create_ward(name="General-A")

        response = client.post("/api/wards", json={"name": "General-A", "type": "GENERAL", "capacity": 2})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["details"]["fields"] == ["name"]

    def test_name_of_inactive_ward_can_be_reused(self, client, create_ward):
        create_ward(name="General-A", is_active=False)

        response = client.post("/api/wards", json={"name": "General-A", "type": "GENERAL", "capacity": 2})
        assert response.status_code == status.HTTP_201_CREATED


class TestWardQueries:
    """Tests for ward reads."""

    def test_get_ward(self, client, ward_with_beds, admit):
        ward = ward_with_beds["ward"]
        admit("P1", ward.id, ward_with_beds["beds"][0].id)

        response = client.get(f"/api/wards/{ward.id}")
        assert response.status_code == status.HTTP_200_OK

        data = response.json()
        assert data["occupied_beds"] == 1
        assert data["total_beds"] == 2

    def test_get_ward_not_found(self, client):
        response = client.get("/api/wards/missing")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "NOT_FOUND"

    def test_list_wards_filters(self, client, create_ward):
        create_ward(name="General-A")
        create_ward(name="ICU-1", type=WardTypeEnum.ICU)
        create_ward(name="Closed", is_active=False)

        response = client.get("/api/wards", params={"is_active": True})
        data = response.json()
        assert data["pagination"]["total_items"] == 2

        response = client.get("/api/wards", params={"type": "ICU"})
        assert [w["name"] for w in response.json()["items"]] == ["ICU-1"]

        response = client.get("/api/wards", params={"search": "gen"})
        assert [w["name"] for w in response.json()["items"]] == ["General-A"]


class TestWardUpdate:
    """Tests for ward edition and activation."""

    def test_update_ward(self, client, ward_with_beds):
        ward = ward_with_beds["ward"]

        response = client.put(f"/api/wards/{ward.id}", json={"capacity": 5, "floor": "2"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["capacity"] == 5
        assert response.json()["floor"] == "2"

    def test_capacity_below_occupied_fails(self, client, ward_with_beds, admit):
        ward = ward_with_beds["ward"]
        for i, bed in enumerate(ward_with_beds["beds"]):
            admit(f"P{i}", ward.id, bed.id)

        response = client.put(f"/api/wards/{ward.id}", json={"capacity": 1})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["details"]["fields"] == ["capacity"]

    def test_rename_to_taken_name_fails(self, client, create_ward):
        create_ward(name="General-A")
        other = create_ward(name="General-B")

        response = client.put(f"/api/wards/{other.id}", json={"name": "General-A"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_deactivate_hides_beds(self, client, ward_with_beds):
        """An inactive ward offers no beds but keeps them."""
        ward = ward_with_beds["ward"]

        response = client.post(f"/api/wards/{ward.id}/deactivate")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_active"] is False
        assert response.json()["total_beds"] == 2

        response = client.get("/api/beds/available", params={"ward_id": ward.id})
        assert response.json() == []

    def test_deactivate_keeps_patients(self, client, ward_with_beds, admit):
        ward = ward_with_beds["ward"]
        admission = admit("P1", ward.id, ward_with_beds["beds"][0].id)

        client.post(f"/api/wards/{ward.id}/deactivate")

        response = client.get(f"/api/admissions/{admission.id}")
        assert response.json()["status"] == "ADMITTED"

    def test_activate_with_name_collision_fails(self, client, create_ward):
        old = create_ward(name="General-A", is_active=False)
        create_ward(name="General-A")

        response = client.post(f"/api/wards/{old.id}/activate")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_activate_ward(self, client, create_ward):
        ward = create_ward(is_active=False)

        response = client.post(f"/api/wards/{ward.id}/activate")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_active"] is True


class TestWardDeletion:
    """Tests for ward deletion."""

    def test_delete_ward_with_patient_refused(self, client, session, ward_with_beds, admit):
        ward = ward_with_beds["ward"]
        admit("P1", ward.id, ward_with_beds["beds"][0].id)

        response = client.delete(f"/api/wards/{ward.id}")
        assert response.status_code == status.HTTP_409_CONFLICT

        data = response.json()
        assert data["error"] == "CONFLICT"
        assert data["details"]["kind"] == "WARD_IN_USE"
        assert data["details"]["activeAdmissions"] == 1
        assert session.get(Ward, ward.id) is not None

    def test_force_delete_removes_everything(self, client, session, ward_with_beds, admit):
        ward = ward_with_beds["ward"]
        admit("P1", ward.id, ward_with_beds["beds"][0].id)
        ward_id = ward.id

        response = client.delete(f"/api/wards/{ward_id}", params={"force": True})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["deleted"]["activeAdmissions"] == 1

        session.expire_all()
        assert session.get(Ward, ward_id) is None
        assert session.exec(select(Bed).where(Bed.ward_id == ward_id)).all() == []
        assert session.exec(select(Admission).where(Admission.ward_id == ward_id)).all() == []

    def test_delete_empty_ward(self, client, session, ward_with_beds):
        ward = ward_with_beds["ward"]
        ward_id = ward.id

        response = client.delete(f"/api/wards/{ward_id}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["deleted"]["totalBeds"] == 2

        session.expire_all()
        assert session.get(Ward, ward_id) is None

    def test_delete_ward_with_history_only(self, client, session, ward_with_beds, admit):
        """Closed admissions do not block a plain delete."""
        from inpatient.services.allocation_service import AllocationService

        ward = ward_with_beds["ward"]
        admission = admit("P1", ward.id, ward_with_beds["beds"][0].id)
        AllocationService(session).discharge_patient(admission.id)

        response = client.delete(f"/api/wards/{ward.id}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["deleted"]["allAdmissions"] == 1

    def test_delete_unknown_ward(self, client):
        response = client.delete("/api/wards/missing")
        assert response.status_code == status.HTTP_404_NOT_FOUND
