"""
Tests for the lab test lifecycle: requests, visibility, results and status moves.
"""
BASE = "/api/v1/lab-tests"


def _request_test(client, headers, patient_id, name="Full Blood Count", test_type="Blood Test"):
    response = client.post(
        BASE,
        json={"name": name, "patient_id": patient_id, "test_type": test_type},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["lab_test"]


class TestCreateLabTest:

    def test_doctor_requests_test(self, client, auth, users):
        lab_test = _request_test(client, auth("doctor"), users["patient"]["id"])

        assert lab_test["status"] == "Requested"
        assert lab_test["priority"] == "Normal"
        assert lab_test["requested_by"] == users["doctor"]["id"]
        assert lab_test["requested_by_name"] == users["doctor"]["name"]
        assert lab_test["patient_name"] == users["patient"]["name"]

    def test_unknown_patient_returns_404(self, client, auth):
        response = client.post(
            BASE,
            json={"name": "MRI Brain", "patient_id": 9999, "test_type": "MRI"},
            headers=auth("doctor"),
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Patient not found"

    def test_invalid_test_type_returns_422(self, client, auth, users):
        response = client.post(
            BASE,
            json={"name": "Odd", "patient_id": users["patient"]["id"], "test_type": "Tarot"},
            headers=auth("doctor"),
        )
        assert response.status_code == 422

    def test_lab_technician_cannot_request(self, client, auth, users):
        response = client.post(
            BASE,
            json={"name": "FBC", "patient_id": users["patient"]["id"], "test_type": "Blood Test"},
            headers=auth("lab_technician"),
        )
        assert response.status_code == 403


class TestVisibility:

    def test_list_is_newest_first(self, client, auth, users):
        headers = auth("doctor")
        first = _request_test(client, headers, users["patient"]["id"], name="First")
        second = _request_test(client, headers, users["patient"]["id"], name="Second")

        ids = [t["id"] for t in client.get(BASE, headers=headers).json()["lab_tests"]]
        assert ids == [second["id"], first["id"]]

    def test_patient_sees_only_own_tests(self, client, auth, users):
        other = client.post(
            "/api/v1/users",
            json={"name": "Other Patient", "email": "other@hospital.test", "role": "patient"},
            headers=auth("admin"),
        ).json()["user"]
        mine = _request_test(client, auth("doctor"), users["patient"]["id"], name="Mine")
        theirs = _request_test(client, auth("doctor"), other["id"], name="Theirs")

        listed = client.get(BASE, headers=auth("patient")).json()["lab_tests"]
        assert [t["id"] for t in listed] == [mine["id"]]

        response = client.get(f"{BASE}/{theirs['id']}", headers=auth("patient"))
        assert response.status_code == 404

    def test_lab_technician_sees_only_tests_they_requested(self, client, auth, users):
        _request_test(client, auth("doctor"), users["patient"]["id"])

        listed = client.get(BASE, headers=auth("lab_technician")).json()["lab_tests"]
        assert listed == []

    def test_admin_sees_everything(self, client, auth, users):
        created = _request_test(client, auth("doctor"), users["patient"]["id"])
        response = client.get(f"{BASE}/{created['id']}", headers=auth("admin"))
        assert response.status_code == 200

    def test_unknown_test_returns_404(self, client, auth):
        assert client.get(f"{BASE}/9999", headers=auth("admin")).status_code == 404


class TestStatusAndResults:

    def test_start_processing_stamps_sample_date_and_notifies(self, client, auth, users):
        lab_test = _request_test(client, auth("doctor"), users["patient"]["id"])

        response = client.put(
            f"{BASE}/{lab_test['id']}/status",
            json={"status": "In Progress"},
            headers=auth("lab_technician"),
        )
        assert response.status_code == 200
        updated = response.json()["lab_test"]
        assert updated["status"] == "In Progress"
        assert updated["sample_collection_date"] is not None

        notes = client.get("/api/v1/notifications", headers=auth("doctor")).json()["data"]
        assert [n["title"] for n in notes] == ["Sample Collected"]

    def test_results_complete_the_test_and_notify_requester(self, client, auth, users):
        lab_test = _request_test(client, auth("doctor"), users["patient"]["id"])

        response = client.put(
            f"{BASE}/{lab_test['id']}/results",
            json={"results": "Hb 13.2 g/dL", "findings": "Normal"},
            headers=auth("lab_technician"),
        )
        assert response.status_code == 200
        updated = response.json()["lab_test"]
        assert updated["status"] == "Completed"
        assert updated["results"] == "Hb 13.2 g/dL"
        assert updated["result_date"] is not None

        notes = client.get("/api/v1/notifications", headers=auth("doctor")).json()["data"]
        assert notes[0]["title"] == "Lab Results Ready"
        assert notes[0]["related_model"] == "LabTest"

    def test_cancelled_test_rejects_results(self, client, auth, users):
        lab_test = _request_test(client, auth("doctor"), users["patient"]["id"])
        client.put(f"{BASE}/{lab_test['id']}/status", json={"status": "Cancelled"}, headers=auth("admin"))

        response = client.put(
            f"{BASE}/{lab_test['id']}/results",
            json={"results": "n/a"},
            headers=auth("lab_technician"),
        )
        assert response.status_code == 409

    def test_completed_cannot_go_back_to_in_progress(self, client, auth, users):
        lab_test = _request_test(client, auth("doctor"), users["patient"]["id"])
        client.put(f"{BASE}/{lab_test['id']}/results", json={"results": "ok"}, headers=auth("admin"))

        response = client.put(
            f"{BASE}/{lab_test['id']}/status",
            json={"status": "In Progress"},
            headers=auth("admin"),
        )
        assert response.status_code == 409
        assert response.json()["context"] == {"current": "Completed", "target": "In Progress"}

    def test_doctor_cannot_record_results(self, client, auth, users):
        lab_test = _request_test(client, auth("doctor"), users["patient"]["id"])
        response = client.put(
            f"{BASE}/{lab_test['id']}/results",
            json={"results": "ok"},
            headers=auth("doctor"),
        )
        assert response.status_code == 403

    def test_results_for_unknown_test_returns_404(self, client, auth):
        response = client.put(f"{BASE}/9999/results", json={"results": "ok"}, headers=auth("admin"))
        assert response.status_code == 404
