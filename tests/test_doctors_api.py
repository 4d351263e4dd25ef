"""Test /api/v1/doctors endpoints."""
import asyncio

from fastapi.testclient import TestClient

from conftest import MONDAY, TUESDAY, WEDNESDAY, WEEKLY_TEMPLATE, make_doctor
from docbook.main import app
from docbook.models.appointment import AppointmentCreate


def _create_body(**overrides) -> dict:
    body = {
        "full_name": "Dr. Asha Rao",
        "specialties": ["cardiology"],
        "clinic": {"name": "Heart Care", "city": "Pune", "latitude": 18.5204, "longitude": 73.8567},
        "consultation_modes": {"telemedicine": True, "in_clinic": True},
        "schedule_template": WEEKLY_TEMPLATE,
    }
    body.update(overrides)
    return body


def test_root_and_health(client):
    assert client.get("/").text == "Doctor Appointment Backend Running"
    assert client.get("/health").json() == {"status": "ok"}


class TestCreateDoctor:
    def test_create_returns_201_with_doctor(self, client, doctor_repo):
        response = client.post("/api/v1/doctors", json=_create_body())

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Doctor created successfully"
        assert data["doctor"]["id"] == 1
        assert data["doctor"]["clinic"]["city"] == "Pune"
        assert data["doctor"]["status"] == "active"
        assert 1 in doctor_repo.doctors

    def test_invalid_schedule_is_422(self, client):
        bad = [{"day_of_week": 1, "is_working": True, "sessions": [
            {"start_time": "12:00", "end_time": "09:00", "slot_duration_minutes": 30}
        ]}]

        response = client.post("/api/v1/doctors", json=_create_body(schedule_template=bad))

        assert response.status_code == 422
        assert response.json()["success"] is False
        assert response.json()["errors"]

    def test_missing_name_is_422(self, client):
        body = _create_body()
        del body["full_name"]
        assert client.post("/api/v1/doctors", json=body).status_code == 422


class TestGetDoctor:
    def test_found(self, client, doctor_repo):
        doctor_repo.add(make_doctor())

        response = client.get("/api/v1/doctors/1")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["doctor"]["full_name"] == "Dr. Asha Rao"

    def test_not_found(self, client):
        response = client.get("/api/v1/doctors/99")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Doctor not found"}


class TestSearchDoctors:
    def _seed(self, repo):
        repo.add(make_doctor(full_name="Cardio Pune"))
        repo.add(
            make_doctor(
                full_name="Derm Mumbai",
                specialties=["dermatology"],
                clinic_city="Mumbai",
                clinic_latitude=19.0760,
                clinic_longitude=72.8777,
                offers_telemedicine=False,
                supports_emergency=True,
            )
        )
        repo.add(make_doctor(full_name="Inactive", status="inactive"))
        repo.add(make_doctor(full_name="Full", is_accepting_new_patients=False))

    def test_no_filters_lists_active_accepting(self, client, doctor_repo):
        self._seed(doctor_repo)

        data = client.get("/api/v1/doctors/search").json()

        assert data["success"] is True
        assert data["total"] == 2
        assert {d["full_name"] for d in data["doctors"]} == {"Cardio Pune", "Derm Mumbai"}

    def test_specialty_and_city(self, client, doctor_repo):
        self._seed(doctor_repo)

        by_specialty = client.get("/api/v1/doctors/search", params={"specialty": "dermatology"}).json()
        by_city = client.get("/api/v1/doctors/search", params={"city": "Pune"}).json()

        assert [d["full_name"] for d in by_specialty["doctors"]] == ["Derm Mumbai"]
        assert [d["full_name"] for d in by_city["doctors"]] == ["Cardio Pune"]

    def test_consultation_type_and_emergency(self, client, doctor_repo):
        self._seed(doctor_repo)

        tele = client.get("/api/v1/doctors/search", params={"consultation_type": "telemedicine"}).json()
        emergency = client.get("/api/v1/doctors/search", params={"supports_emergency": "true"}).json()
        not_emergency = client.get("/api/v1/doctors/search", params={"supports_emergency": "false"}).json()

        assert [d["full_name"] for d in tele["doctors"]] == ["Cardio Pune"]
        assert [d["full_name"] for d in emergency["doctors"]] == ["Derm Mumbai"]
        assert not_emergency["total"] == 2

    def test_unknown_consultation_type_is_422(self, client):
        response = client.get("/api/v1/doctors/search", params={"consultation_type": "house_call"})
        assert response.status_code == 422

    def test_camel_case_in_clinic_is_accepted(self, client, doctor_repo):
        self._seed(doctor_repo)
        doctor_repo.add(make_doctor(full_name="Online only", offers_in_clinic=False))

        camel = client.get("/api/v1/doctors/search", params={"consultation_type": "inClinic"})
        snake = client.get("/api/v1/doctors/search", params={"consultation_type": "in_clinic"})

        assert camel.status_code == 200
        assert camel.json() == snake.json()
        assert {d["full_name"] for d in camel.json()["doctors"]} == {"Cardio Pune", "Derm Mumbai"}

    def test_geolocation_radius(self, client, doctor_repo):
        self._seed(doctor_repo)

        data = client.get(
            "/api/v1/doctors/search", params={"lat": 18.53, "lng": 73.85, "radius_km": 25}
        ).json()

        assert [d["full_name"] for d in data["doctors"]] == ["Cardio Pune"]
        assert 0 < data["doctors"][0]["distance_km"] < 25

    def test_geolocation_ignored_without_radius(self, client, doctor_repo):
        self._seed(doctor_repo)

        data = client.get("/api/v1/doctors/search", params={"lat": 18.53, "lng": 73.85}).json()

        assert data["total"] == 2
        assert all(d["distance_km"] is None for d in data["doctors"])

    def test_date_filters_by_working_weekday(self, client, doctor_repo):
        self._seed(doctor_repo)

        monday = client.get("/api/v1/doctors/search", params={"date": MONDAY.isoformat()}).json()
        tuesday = client.get("/api/v1/doctors/search", params={"date": TUESDAY.isoformat()}).json()

        assert monday["total"] == 2
        assert tuesday == {"success": True, "total": 0, "doctors": []}


class TestDoctorSlots:
    def test_date_is_required(self, client, doctor_repo):
        doctor_repo.add(make_doctor())

        response = client.get("/api/v1/doctors/1/slots")

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Date is required as query parameter"}

    def test_malformed_date_is_400(self, client, doctor_repo):
        doctor_repo.add(make_doctor())
        response = client.get("/api/v1/doctors/1/slots", params={"date": "13/01/2025"})
        assert response.status_code == 400

    def test_unknown_doctor_is_404(self, client):
        response = client.get("/api/v1/doctors/5/slots", params={"date": MONDAY.isoformat()})
        assert response.status_code == 404
        assert response.json()["message"] == "Doctor not found"

    def test_slots_mark_booked_times(self, client, doctor_repo, appointment_repo):
        doctor_repo.add(make_doctor())
        for t in ("09:30", "15:00"):
            asyncio.run(appointment_repo.create(
                AppointmentCreate(doctor_id=1, appointment_date=MONDAY, start_time=t, patient_name="P")
            ))

        response = client.get("/api/v1/doctors/1/slots", params={"date": MONDAY.isoformat()})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["date"] == "2025-01-13"
        assert data["total_slots"] == 10
        assert "message" not in data
        booked = [s["time"] for s in data["slots"] if s["status"] == "booked"]
        assert booked == ["09:30", "15:00"]
        assert [s["time"] for s in data["slots"]][:2] == ["09:00", "09:30"]

    def test_cancelled_appointments_free_the_slot(self, client, doctor_repo, appointment_repo):
        doctor_repo.add(make_doctor())
        appt = asyncio.run(appointment_repo.create(
            AppointmentCreate(doctor_id=1, appointment_date=WEDNESDAY, start_time="10:20", patient_name="P")
        ))
        asyncio.run(appointment_repo.cancel(appt.id))

        data = client.get("/api/v1/doctors/1/slots", params={"date": WEDNESDAY.isoformat()}).json()

        assert [(s["time"], s["status"]) for s in data["slots"]] == [
            ("10:00", "available"),
            ("10:20", "available"),
            ("10:40", "available"),
        ]

    def test_malformed_stored_session_is_skipped(self, client, doctor_repo):
        doctor_repo.add(make_doctor(schedule_template=[{
            "day_of_week": 1,
            "is_working": True,
            "sessions": [
                {"start_time": "9:00", "end_time": "10:00", "slot_duration_minutes": 30},
                {"start_time": "14:00", "end_time": "15:00", "slot_duration_minutes": 30},
            ],
        }]))

        slots = client.get("/api/v1/doctors/1/slots", params={"date": MONDAY.isoformat()})
        profile = client.get("/api/v1/doctors/1")
        search = client.get("/api/v1/doctors/search", params={"date": MONDAY.isoformat()})

        assert slots.status_code == 200
        assert slots.json()["slots"] == [
            {"time": "14:00", "status": "available"},
            {"time": "14:30", "status": "available"},
        ]
        assert profile.status_code == 200
        assert len(profile.json()["doctor"]["schedule_template"][0]["sessions"]) == 1
        assert search.status_code == 200
        assert search.json()["total"] == 1

    def test_day_off_returns_message(self, client, doctor_repo):
        doctor_repo.add(make_doctor())

        response = client.get("/api/v1/doctors/1/slots", params={"date": TUESDAY.isoformat()})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "date": "2025-01-14",
            "total_slots": 0,
            "slots": [],
            "message": "Doctor not available on selected date",
        }


def test_unexpected_error_is_generic_500():
    class BrokenRepository:
        async def get(self, doctor_id):
            raise RuntimeError("connection refused: db-internal-host:5432")

    from docbook.api.deps import get_doctor_repository

    app.dependency_overrides[get_doctor_repository] = lambda: BrokenRepository()
    try:
        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/api/v1/doctors/1")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Server error"}
    assert "db-internal-host" not in response.text


def test_cors_preflight_allows_only_content_type(client):
    from docbook.core.config import settings

    origin = settings.cors_origins_list[0]
    headers = {"Origin": origin, "Access-Control-Request-Method": "POST"}

    ok = client.options(
        "/api/v1/appointments", headers={**headers, "Access-Control-Request-Headers": "content-type"}
    )
    denied = client.options(
        "/api/v1/appointments", headers={**headers, "Access-Control-Request-Headers": "authorization"}
    )

    assert ok.status_code == 200
    assert "authorization" not in ok.headers["access-control-allow-headers"].lower()
    assert denied.status_code == 400
