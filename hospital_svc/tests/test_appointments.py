"""
Tests for appointment booking, slot conflicts and the status envelope.
"""
from datetime import timedelta

from core.datetime_utils import today_utc

BASE = "/api/v1/appointments"


def _book(client, headers, patient_id, doctor_id, day=None, time="10:30"):
    day = day or today_utc() + timedelta(days=3)
    response = client.post(
        BASE,
        json={
            "patient_id": patient_id,
            "doctor_id": doctor_id,
            "date": day.isoformat(),
            "time": time,
            "reason": "Chest pain follow-up",
        },
        headers=headers,
    )
    return response


def _booked(client, headers, patient_id, doctor_id, **kwargs):
    response = _book(client, headers, patient_id, doctor_id, **kwargs)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestBooking:

    def test_booking_returns_status_envelope_and_notifies_doctor(self, client, auth, users, doctor_profile):
        response = _book(client, auth("staff"), users["patient"]["id"], doctor_profile["id"])
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "success"
        appointment = body["data"]
        assert appointment["status"] == "Scheduled"
        assert appointment["patient_name"] == users["patient"]["name"]
        assert appointment["doctor_name"] == users["doctor"]["name"]
        assert appointment["reminder_sent"] is False

        notes = client.get("/api/v1/notifications", headers=auth("doctor")).json()["data"]
        assert notes[0]["title"] == "New Appointment Scheduled"
        assert notes[0]["related_id"] == appointment["id"]

    def test_patient_can_book(self, client, auth, users, doctor_profile):
        response = _book(client, auth("patient"), users["patient"]["id"], doctor_profile["id"])
        assert response.status_code == 201

    def test_taken_slot_returns_409(self, client, auth, users, doctor_profile):
        headers = auth("staff")
        _booked(client, headers, users["patient"]["id"], doctor_profile["id"])

        response = _book(client, headers, users["admin"]["id"], doctor_profile["id"])
        assert response.status_code == 409
        assert response.json()["detail"] == "Doctor is not available at this time"

    def test_cancelled_appointment_frees_slot(self, client, auth, users, doctor_profile):
        headers = auth("staff")
        first = _booked(client, headers, users["patient"]["id"], doctor_profile["id"])
        client.patch(f"{BASE}/{first['id']}/status", json={"status": "Cancelled"}, headers=headers)

        response = _book(client, headers, users["admin"]["id"], doctor_profile["id"])
        assert response.status_code == 201

    def test_unknown_doctor_returns_404(self, client, auth, users):
        response = _book(client, auth("staff"), users["patient"]["id"], 9999)
        assert response.status_code == 404
        assert response.json()["detail"] == "Doctor not found"

    def test_unknown_patient_returns_404(self, client, auth, doctor_profile):
        response = _book(client, auth("staff"), 9999, doctor_profile["id"])
        assert response.status_code == 404

    def test_bad_time_returns_422(self, client, auth, users, doctor_profile):
        response = _book(client, auth("staff"), users["patient"]["id"], doctor_profile["id"], time="25:00")
        assert response.status_code == 422

    def test_pharmacist_cannot_book(self, client, auth, users, doctor_profile):
        response = _book(client, auth("pharmacist"), users["patient"]["id"], doctor_profile["id"])
        assert response.status_code == 403


class TestListing:

    def test_list_has_result_count(self, client, auth, users, doctor_profile):
        headers = auth("staff")
        _booked(client, headers, users["patient"]["id"], doctor_profile["id"], time="09:00")
        _booked(client, headers, users["patient"]["id"], doctor_profile["id"], time="11:00")

        body = client.get(BASE, headers=headers).json()
        assert body["status"] == "success"
        assert body["results"] == 2
        assert [a["time"] for a in body["data"]] == ["09:00", "11:00"]

    def test_today_and_upcoming(self, client, auth, users, doctor_profile):
        headers = auth("staff")
        today = _booked(client, headers, users["patient"]["id"], doctor_profile["id"], day=today_utc())
        later = _booked(client, headers, users["patient"]["id"], doctor_profile["id"],
                        day=today_utc() + timedelta(days=7))
        _booked(client, headers, users["patient"]["id"], doctor_profile["id"],
                day=today_utc() - timedelta(days=7))
        done = _booked(client, headers, users["patient"]["id"], doctor_profile["id"],
                       day=today_utc() + timedelta(days=2))
        client.patch(f"{BASE}/{done['id']}/status", json={"status": "Completed"}, headers=headers)

        todays = client.get(f"{BASE}/today", headers=headers).json()["data"]
        assert [a["id"] for a in todays] == [today["id"]]

        upcoming = client.get(f"{BASE}/upcoming", headers=headers).json()["data"]
        assert [a["id"] for a in upcoming] == [today["id"], later["id"]]

    def test_by_patient_is_newest_first(self, client, auth, users, doctor_profile):
        headers = auth("staff")
        older = _booked(client, headers, users["patient"]["id"], doctor_profile["id"],
                        day=today_utc() + timedelta(days=1))
        newer = _booked(client, headers, users["patient"]["id"], doctor_profile["id"],
                        day=today_utc() + timedelta(days=5))

        body = client.get(f"{BASE}/patient/{users['patient']['id']}", headers=headers).json()
        assert [a["id"] for a in body["data"]] == [newer["id"], older["id"]]

    def test_patient_reads_own_appointments_only(self, client, auth, users, doctor_profile):
        _booked(client, auth("staff"), users["patient"]["id"], doctor_profile["id"])

        own = client.get(f"{BASE}/patient/{users['patient']['id']}", headers=auth("patient"))
        assert own.status_code == 200
        assert own.json()["results"] == 1

        other = client.get(f"{BASE}/patient/{users['admin']['id']}", headers=auth("patient"))
        assert other.status_code == 403

    def test_by_doctor(self, client, auth, users, doctor_profile):
        _booked(client, auth("staff"), users["patient"]["id"], doctor_profile["id"])
        body = client.get(f"{BASE}/doctor/{doctor_profile['id']}", headers=auth("doctor")).json()
        assert body["results"] == 1

    def test_get_unknown_returns_404(self, client, auth):
        assert client.get(f"{BASE}/9999", headers=auth("admin")).status_code == 404


class TestChanges:

    def test_confirming_notifies_patient(self, client, auth, users, doctor_profile):
        appointment = _booked(client, auth("staff"), users["patient"]["id"], doctor_profile["id"])

        response = client.patch(
            f"{BASE}/{appointment['id']}/status",
            json={"status": "Confirmed"},
            headers=auth("doctor"),
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "Confirmed"

        notes = client.get("/api/v1/notifications", headers=auth("patient")).json()["data"]
        assert notes[0]["title"] == "Appointment Confirmed"

    def test_moving_into_taken_slot_returns_409(self, client, auth, users, doctor_profile):
        headers = auth("staff")
        _booked(client, headers, users["patient"]["id"], doctor_profile["id"], time="09:00")
        second = _booked(client, headers, users["patient"]["id"], doctor_profile["id"], time="10:00")

        response = client.put(f"{BASE}/{second['id']}", json={"time": "09:00"}, headers=headers)
        assert response.status_code == 409

    def test_reopening_cancelled_appointment_into_taken_slot_returns_409(self, client, auth, users, doctor_profile):
        headers = auth("staff")
        first = _booked(client, headers, users["patient"]["id"], doctor_profile["id"])
        client.patch(f"{BASE}/{first['id']}/status", json={"status": "Cancelled"}, headers=headers)
        _booked(client, headers, users["admin"]["id"], doctor_profile["id"])

        response = client.patch(f"{BASE}/{first['id']}/status", json={"status": "Scheduled"}, headers=headers)
        assert response.status_code == 409
        assert response.json()["detail"] == "Doctor is not available at this time"

        response = client.put(f"{BASE}/{first['id']}", json={"status": "Confirmed"}, headers=headers)
        assert response.status_code == 409
        assert client.get(f"{BASE}/{first['id']}", headers=headers).json()["data"]["status"] == "Cancelled"

    def test_reopening_into_free_slot_is_allowed(self, client, auth, users, doctor_profile):
        headers = auth("staff")
        appointment = _booked(client, headers, users["patient"]["id"], doctor_profile["id"])
        client.patch(f"{BASE}/{appointment['id']}/status", json={"status": "Completed"}, headers=headers)

        response = client.patch(
            f"{BASE}/{appointment['id']}/status", json={"status": "Scheduled"}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "Scheduled"

    def test_status_change_on_unknown_appointment_returns_404(self, client, auth):
        response = client.patch(f"{BASE}/9999/status", json={"status": "Confirmed"}, headers=auth("staff"))
        assert response.status_code == 404

    def test_update_notes_keeps_slot(self, client, auth, users, doctor_profile):
        headers = auth("staff")
        appointment = _booked(client, headers, users["patient"]["id"], doctor_profile["id"])

        response = client.put(
            f"{BASE}/{appointment['id']}",
            json={"notes": "Bring ECG", "reminder_sent": True},
            headers=headers,
        )
        assert response.status_code == 200
        updated = response.json()["data"]
        assert updated["notes"] == "Bring ECG"
        assert updated["reminder_sent"] is True
        assert updated["time"] == appointment["time"]

    def test_delete(self, client, auth, users, doctor_profile):
        headers = auth("staff")
        appointment = _booked(client, headers, users["patient"]["id"], doctor_profile["id"])

        assert client.delete(f"{BASE}/{appointment['id']}", headers=headers).status_code == 204
        assert client.get(f"{BASE}/{appointment['id']}", headers=headers).status_code == 404
        assert client.delete(f"{BASE}/{appointment['id']}", headers=headers).status_code == 404

    def test_patient_cannot_change_status(self, client, auth, users, doctor_profile):
        appointment = _booked(client, auth("staff"), users["patient"]["id"], doctor_profile["id"])
        response = client.patch(
            f"{BASE}/{appointment['id']}/status",
            json={"status": "Cancelled"},
            headers=auth("patient"),
        )
        assert response.status_code == 403
