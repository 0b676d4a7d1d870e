from datetime import date, timedelta

import pytest

API = "/api/v1/patient"

def doctor_id_by_name(client, headers, name):
    doctors = client.get(f"{API}/doctors", params={"q": name}, headers=headers).json()
    return doctors[0]["id"]

class TestDoctorDirectory:

    def test_lists_doctors_with_open_slots(self, client, patient_headers):
        response = client.get(f"{API}/doctors", headers=patient_headers)
        assert response.status_code == 200

        doctors = response.json()
        assert len(doctors) == 4
        sarah = next(d for d in doctors if d["name"] == "Dr. Sarah Johnson")
        assert sarah["specialty"] == "Cardiology"
        assert len(sarah["slots"]) == 3
        assert all(slot["available"] for slot in sarah["slots"])

    @pytest.mark.parametrize("query,expected", [
        ("cardio", ["Dr. Sarah Johnson"]),
        ("  CHEN", ["Dr. Michael Chen"]),
        ("children", ["Dr. Emily Rodriguez"]),
        ("", ["Dr. Demo Doctor", "Dr. Sarah Johnson", "Dr. Michael Chen", "Dr. Emily Rodriguez"]),
        ("dentistry", []),
    ])
    def test_search(self, client, patient_headers, query, expected):
        response = client.get(f"{API}/doctors", params={"q": query}, headers=patient_headers)
        assert [d["name"] for d in response.json()] == expected

class TestBooking:

    def test_own_appointments_only(self, client, patient_headers):
        response = client.get(f"{API}/appointments", headers=patient_headers)
        assert response.status_code == 200

        appointments = response.json()
        assert len(appointments) == 3
        assert {a["patient_name"] for a in appointments} == {"Patient Demo"}

    def test_book_appointment(self, client, patient_headers):
        doctor_id = doctor_id_by_name(client, patient_headers, "emily")
        visit_day = str(date.today() + timedelta(days=5))

        response = client.post(f"{API}/appointments", headers=patient_headers, json={
            "doctor_id": doctor_id,
            "date": visit_day,
            "time": "13:00",
            "reason": "Vaccination"
        })
        assert response.status_code == 201

        data = response.json()
        assert data["status"] == "scheduled"
        assert data["doctor_name"] == "Dr. Emily Rodriguez"
        assert data["patient_name"] == "Patient Demo"

        mine = client.get(f"{API}/appointments", headers=patient_headers).json()
        assert data["id"] in [a["id"] for a in mine]

    @pytest.mark.parametrize("payload", [
        {"date": "2030-01-01", "time": "10:00"},
        {"doctor_id": 1, "time": "10:00"},
        {"doctor_id": 1, "date": "2030-01-01", "time": "9am"},
        {"doctor_id": 1, "date": "not-a-date", "time": "10:00"},
    ])
    def test_booking_needs_doctor_date_and_time(self, client, patient_headers, payload):
        response = client.post(f"{API}/appointments", headers=patient_headers, json=payload)
        assert response.status_code == 422

    def test_booking_unknown_doctor(self, client, patient_headers):
        response = client.post(f"{API}/appointments", headers=patient_headers, json={
            "doctor_id": 9999, "date": "2030-01-01", "time": "10:00"
        })
        assert response.status_code == 404

    def test_reschedule_keeps_other_fields(self, client, patient_headers):
        original = client.get(f"{API}/appointments", params={"status": "scheduled"}, headers=patient_headers).json()[0]

        response = client.patch(
            f"{API}/appointments/{original['id']}",
            headers=patient_headers,
            json={"time": "11:45"}
        )
        assert response.status_code == 200

        data = response.json()
        assert data["id"] == original["id"]
        assert data["time"] == "11:45"
        assert data["date"] == original["date"]
        assert data["doctor_id"] == original["doctor_id"]
        assert data["reason"] == original["reason"]

    def test_cancel_appointment(self, client, patient_headers):
        original = client.get(f"{API}/appointments", params={"status": "scheduled"}, headers=patient_headers).json()[0]

        response = client.post(f"{API}/appointments/{original['id']}/cancel", headers=patient_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

        cancelled = client.get(f"{API}/appointments", params={"status": "cancelled"}, headers=patient_headers).json()
        assert [a["id"] for a in cancelled] == [original["id"]]

    def test_delete_appointment(self, client, patient_headers):
        before = client.get(f"{API}/appointments", headers=patient_headers).json()

        response = client.delete(f"{API}/appointments/{before[0]['id']}", headers=patient_headers)
        assert response.status_code == 204

        after = client.get(f"{API}/appointments", headers=patient_headers).json()
        assert after == before[1:]

class TestOtherPatientsAppointments:

    @pytest.fixture
    def foreign_id(self, client, patient_headers):
        admin = client.post("/api/v1/auth/login", json={
            "email": "admin@demo.test", "password": "admin123"
        }).json()
        headers = {"Authorization": f"Bearer {admin['access_token']}"}
        appointments = client.get("/api/v1/admin/appointments", params={"q": "john doe"}, headers=headers).json()
        return appointments[0]["id"]

    def test_cannot_reschedule(self, client, patient_headers, foreign_id):
        response = client.patch(f"{API}/appointments/{foreign_id}", headers=patient_headers, json={"time": "10:30"})
        assert response.status_code == 404

    def test_cannot_cancel(self, client, patient_headers, foreign_id):
        response = client.post(f"{API}/appointments/{foreign_id}/cancel", headers=patient_headers)
        assert response.status_code == 404

    def test_cannot_delete(self, client, patient_headers, foreign_id):
        response = client.delete(f"{API}/appointments/{foreign_id}", headers=patient_headers)
        assert response.status_code == 404

class TestRecords:

    def test_medical_records(self, client, patient_headers):
        response = client.get(f"{API}/records", headers=patient_headers)
        assert response.status_code == 200

        records = response.json()
        assert [r["doctor"] for r in records] == ["Dr. Sarah Johnson", "Dr. Michael Chen"]
        assert records[1]["prescriptions"] == ["Sumatriptan 50mg"]

    def test_summary(self, client, patient_headers):
        response = client.get(f"{API}/summary", headers=patient_headers)
        assert response.status_code == 200
        assert response.json() == {"upcoming_appointments": 2, "medical_records": 2}

class TestNewPatientAccount:

    @pytest.fixture
    def new_patient_headers(self, client, test_db):
        client.post("/api/v1/auth/register", json={
            "email": "maria@example.com",
            "password": "secret99",
            "full_name": "Maria Lopez"
        })
        tokens = client.post("/api/v1/auth/login", json={
            "email": "maria@example.com", "password": "secret99"
        }).json()
        return {"Authorization": f"Bearer {tokens['access_token']}"}

    def test_starts_with_empty_history(self, client, new_patient_headers):
        assert client.get(f"{API}/appointments", headers=new_patient_headers).json() == []
        assert client.get(f"{API}/records", headers=new_patient_headers).json() == []

    def test_first_booking_creates_patient_record(self, client, new_patient_headers):
        doctor_id = doctor_id_by_name(client, new_patient_headers, "sarah")
        response = client.post(f"{API}/appointments", headers=new_patient_headers, json={
            "doctor_id": doctor_id,
            "date": str(date.today() + timedelta(days=2)),
            "time": "09:30"
        })
        assert response.status_code == 201
        assert response.json()["patient_name"] == "Maria Lopez"

        summary = client.get(f"{API}/summary", headers=new_patient_headers).json()
        assert summary["upcoming_appointments"] == 1
