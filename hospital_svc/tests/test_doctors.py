"""
Tests for doctor profiles and schedules.
"""
BASE = "/api/v1/doctors"


def _doctor_payload(user_id, license_number="SLMC-2001"):
    return {
        "user_id": user_id,
        "specialization": "Neurology",
        "license_number": license_number,
        "qualifications": [{"degree": "MBBS", "institution": "University of Peradeniya", "year": 2010}],
        "experience": 12,
        "schedule": [{"day": "Monday", "start_time": "09:00", "end_time": "13:00"}],
    }


def test_admin_creates_doctor(client, auth, users):
    response = client.post(BASE, json=_doctor_payload(users["doctor"]["id"]), headers=auth("admin"))
    assert response.status_code == 201
    doctor = response.json()["doctor"]
    assert doctor["user"]["name"] == users["doctor"]["name"]
    assert doctor["user"]["email"] == "doctor@hospital.test"
    assert doctor["max_patients_per_day"] == 20
    assert doctor["schedule"][0]["is_available"] is True
    assert doctor["qualifications"][0]["degree"] == "MBBS"


def test_duplicate_license_returns_409(client, auth, users, doctor_profile):
    payload = _doctor_payload(users["staff"]["id"], license_number=doctor_profile["license_number"])
    response = client.post(BASE, json=payload, headers=auth("admin"))
    assert response.status_code == 409


def test_unknown_user_returns_404(client, auth):
    response = client.post(BASE, json=_doctor_payload(9999), headers=auth("admin"))
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_doctor_cannot_create_profiles(client, auth, users):
    response = client.post(BASE, json=_doctor_payload(users["doctor"]["id"]), headers=auth("doctor"))
    assert response.status_code == 403


def test_any_authenticated_user_lists_doctors(client, auth, doctor_profile):
    response = client.get(BASE, headers=auth("patient"))
    assert response.status_code == 200
    doctors = response.json()["doctors"]
    assert [d["id"] for d in doctors] == [doctor_profile["id"]]
    assert doctors[0]["specialization"] == "Cardiology"


def test_get_doctor(client, auth, doctor_profile):
    response = client.get(f"{BASE}/{doctor_profile['id']}", headers=auth("staff"))
    assert response.status_code == 200
    assert response.json()["doctor"]["license_number"] == "SLMC-0001"


def test_get_unknown_doctor_returns_404(client, auth):
    assert client.get(f"{BASE}/9999", headers=auth("admin")).status_code == 404


def test_update_schedule_replaces_slots(client, auth, doctor_profile):
    response = client.put(
        f"{BASE}/{doctor_profile['id']}/schedule",
        json={"schedule": [
            {"day": "Tuesday", "start_time": "14:00", "end_time": "18:00"},
            {"day": "Friday", "is_available": False},
        ]},
        headers=auth("doctor"),
    )
    assert response.status_code == 200
    schedule = response.json()["doctor"]["schedule"]
    assert [slot["day"] for slot in schedule] == ["Tuesday", "Friday"]
    assert schedule[1]["is_available"] is False


def test_update_schedule_rejects_bad_day(client, auth, doctor_profile):
    response = client.put(
        f"{BASE}/{doctor_profile['id']}/schedule",
        json={"schedule": [{"day": "Funday"}]},
        headers=auth("admin"),
    )
    assert response.status_code == 422


def test_update_schedule_unknown_doctor_returns_404(client, auth):
    response = client.put(f"{BASE}/9999/schedule", json={"schedule": []}, headers=auth("admin"))
    assert response.status_code == 404
