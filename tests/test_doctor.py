from datetime import date, datetime, timedelta

API = "/api/v1/doctor"

class TestAppointmentBoard:

    def test_board_partitions_own_appointments(self, client, doctor_headers):
        response = client.get(f"{API}/appointments", headers=doctor_headers)
        assert response.status_code == 200

        board = response.json()
        today = date.today()
        assert [a["date"] for a in board["upcoming"]] == [str(today + timedelta(days=1))]
        assert [a["date"] for a in board["future"]] == [str(today + timedelta(days=12))]
        assert [a["date"] for a in board["past"]] == [str(today - timedelta(days=2))]

        everything = board["upcoming"] + board["future"] + board["past"]
        assert {a["doctor_name"] for a in everything} == {"Dr. Demo Doctor"}

    def test_past_is_most_recent_first(self, client, doctor_headers):
        doctor_id = client.get(f"{API}/appointments", headers=doctor_headers).json()["past"][0]["doctor_id"]
        admin = _admin_headers(client)
        patient_id = client.get("/api/v1/admin/patients", headers=admin).json()[0]["id"]
        for offset in (3, 20):
            client.post("/api/v1/admin/appointments", headers=admin, json={
                "patient_id": patient_id,
                "doctor_id": doctor_id,
                "date": str(date.today() - timedelta(days=offset)),
                "time": "09:00"
            })

        past = client.get(f"{API}/appointments", headers=doctor_headers).json()["past"]
        starts = [a["starts_at"] for a in past]
        assert starts == sorted(starts, reverse=True)
        assert len(past) == 3

    def test_appointment_starting_soon_is_flagged(self, client, doctor_headers):
        doctor_id = client.get(f"{API}/appointments", headers=doctor_headers).json()["past"][0]["doctor_id"]
        admin = _admin_headers(client)
        patient_id = client.get("/api/v1/admin/patients", headers=admin).json()[0]["id"]

        soon = datetime.now() + timedelta(minutes=20)
        created = client.post("/api/v1/admin/appointments", headers=admin, json={
            "patient_id": patient_id,
            "doctor_id": doctor_id,
            "date": str(soon.date()),
            "time": soon.strftime("%H:%M")
        }).json()

        board = client.get(f"{API}/appointments", headers=doctor_headers).json()
        everything = board["upcoming"] + board["future"] + board["past"]
        flagged = [a["id"] for a in everything if a["is_now"]]
        assert flagged == [created["id"]]

    def test_doctor_without_record_has_empty_board(self, client, test_db):
        client.post("/api/v1/auth/register", json={
            "email": "new.doctor@example.com",
            "password": "doctor456",
            "full_name": "New Doctor",
            "role": "doctor"
        })
        tokens = client.post("/api/v1/auth/login", json={
            "email": "new.doctor@example.com", "password": "doctor456"
        }).json()
        headers = {"Authorization": f"Bearer {tokens['access_token']}"}

        response = client.get(f"{API}/appointments", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"upcoming": [], "future": [], "past": []}

class TestOwnAppointments:

    def test_mark_completed_with_notes(self, client, doctor_headers):
        appointment = client.get(f"{API}/appointments", headers=doctor_headers).json()["upcoming"][0]

        response = client.patch(
            f"{API}/appointments/{appointment['id']}",
            headers=doctor_headers,
            json={"status": "completed", "notes": "ECG normal"}
        )
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "completed"
        assert data["notes"] == "ECG normal"
        assert data["time"] == appointment["time"]

    def test_other_doctors_appointment_is_not_found(self, client, doctor_headers):
        admin = _admin_headers(client)
        others = client.get("/api/v1/admin/appointments", params={"q": "sarah"}, headers=admin).json()

        response = client.patch(
            f"{API}/appointments/{others[0]['id']}",
            headers=doctor_headers,
            json={"status": "completed"}
        )
        assert response.status_code == 404

    def test_doctor_cannot_move_appointment(self, client, doctor_headers):
        appointment = client.get(f"{API}/appointments", headers=doctor_headers).json()["upcoming"][0]

        response = client.patch(
            f"{API}/appointments/{appointment['id']}",
            headers=doctor_headers,
            json={"date": "2030-01-01"}
        )
        assert response.status_code == 200
        assert response.json()["date"] == appointment["date"]

class TestPatientHistory:

    def test_search_by_name(self, client, doctor_headers):
        response = client.get(f"{API}/patients", params={"q": "JOHN d"}, headers=doctor_headers)
        assert [p["full_name"] for p in response.json()] == ["John Doe"]

    def test_search_by_id(self, client, doctor_headers):
        patients = client.get(f"{API}/patients", headers=doctor_headers).json()
        assert len(patients) == 3

        ayesha = next(p for p in patients if p["first_name"] == "Ayesha")
        response = client.get(f"{API}/patients", params={"q": str(ayesha["id"])}, headers=doctor_headers)
        assert ayesha["id"] in [p["id"] for p in response.json()]

    def test_history_lists_records_newest_first(self, client, doctor_headers):
        demo = client.get(f"{API}/patients", params={"q": "patient demo"}, headers=doctor_headers).json()[0]

        response = client.get(f"{API}/patients/{demo['id']}", headers=doctor_headers)
        assert response.status_code == 200

        records = response.json()["medical_records"]
        assert [r["diagnosis"] for r in records] == ["Hypertension", "Migraine"]
        assert records[0]["prescriptions"] == ["Lisinopril 10mg", "Amlodipine 5mg"]

    def test_unknown_patient(self, client, doctor_headers):
        response = client.get(f"{API}/patients/9999", headers=doctor_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Patient 9999 not found"

class TestPrescriptions:

    def _john(self, client, headers):
        return client.get(f"{API}/patients", params={"q": "john doe"}, headers=headers).json()[0]

    def test_add_prescription_is_listed_first(self, client, doctor_headers):
        john = self._john(client, doctor_headers)

        response = client.post(
            f"{API}/patients/{john['id']}/prescriptions",
            headers=doctor_headers,
            json={"meds": "Atorvastatin 20mg nightly", "notes": "Recheck lipids in 6 weeks"}
        )
        assert response.status_code == 201

        created = response.json()
        assert created["id"].startswith("rx_")
        assert created["patient_id"] == john["id"]

        doctor_user_id = client.get("/api/v1/auth/me", headers=doctor_headers).json()["id"]
        assert created["prescribed_by"] == doctor_user_id

        listed = client.get(f"{API}/patients/{john['id']}/prescriptions", headers=doctor_headers).json()
        assert [p["id"] for p in listed] == [created["id"], "rx_seed_john"]

    def test_meds_are_required(self, client, doctor_headers):
        john = self._john(client, doctor_headers)
        response = client.post(
            f"{API}/patients/{john['id']}/prescriptions",
            headers=doctor_headers,
            json={"meds": "   "}
        )
        assert response.status_code == 422

    def test_update_prescription(self, client, doctor_headers):
        john = self._john(client, doctor_headers)

        response = client.put(
            f"{API}/patients/{john['id']}/prescriptions/rx_seed_john",
            headers=doctor_headers,
            json={"meds": "Aspirin 75mg once daily", "notes": "ECG normal, continue"}
        )
        assert response.status_code == 200
        assert response.json()["id"] == "rx_seed_john"
        assert response.json()["notes"] == "ECG normal, continue"
        assert response.json()["prescribed_by"] is None

    def test_delete_prescription(self, client, doctor_headers):
        john = self._john(client, doctor_headers)
        url = f"{API}/patients/{john['id']}/prescriptions/rx_seed_john"

        assert client.delete(url, headers=doctor_headers).status_code == 204
        assert client.delete(url, headers=doctor_headers).status_code == 404
        assert client.get(f"{API}/patients/{john['id']}/prescriptions", headers=doctor_headers).json() == []

    def test_prescription_belongs_to_its_patient(self, client, doctor_headers):
        ayesha = client.get(f"{API}/patients", params={"q": "ayesha"}, headers=doctor_headers).json()[0]
        response = client.delete(
            f"{API}/patients/{ayesha['id']}/prescriptions/rx_seed_john",
            headers=doctor_headers
        )
        assert response.status_code == 404

def _admin_headers(client):
    tokens = client.post("/api/v1/auth/login", json={
        "email": "admin@demo.test", "password": "admin123"
    }).json()
    return {"Authorization": f"Bearer {tokens['access_token']}"}
