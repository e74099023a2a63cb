from typing import Dict

from fastapi.testclient import TestClient

API = "/api/v1"


class TestSubjectRoutes:
    def test_admin_manages_subjects(self, client: TestClient, admin_headers: Dict[str, str]) -> None:
        created = client.post(f"{API}/subjects", headers=admin_headers, json={"name": " Chemistry "})
        assert created.status_code == 201
        subject = created.json()
        assert subject["name"] == "Chemistry"

        renamed = client.patch(
            f"{API}/subjects/{subject['id']}", headers=admin_headers, json={"name": "Organic Chemistry"}
        )
        assert renamed.json()["name"] == "Organic Chemistry"

        names = [item["name"] for item in client.get(f"{API}/subjects").json()]
        assert "Organic Chemistry" in names

        deleted = client.delete(f"{API}/subjects/{subject['id']}", headers=admin_headers)
        assert deleted.status_code == 204
        names = [item["name"] for item in client.get(f"{API}/subjects").json()]
        assert "Organic Chemistry" not in names

    def test_duplicate_subject(self, client: TestClient, admin_headers: Dict[str, str]) -> None:
        client.post(f"{API}/subjects", headers=admin_headers, json={"name": "Biology"})
        response = client.post(f"{API}/subjects", headers=admin_headers, json={"name": "Biology"})

        assert response.status_code == 409
        assert response.json()["code"] == "SUBJECT_EXISTS"

    def test_students_cannot_create_subjects(
        self, client: TestClient, student_headers: Dict[str, str]
    ) -> None:
        response = client.post(f"{API}/subjects", headers=student_headers, json={"name": "Art"})
        assert response.status_code == 403


class TestOptionRoutes:
    def test_meta_options_lists_active_categories(
        self, client: TestClient, admin_headers: Dict[str, str]
    ) -> None:
        client.post(
            f"{API}/option-categories",
            headers=admin_headers,
            json={"key": "board", "label": "Board", "options": ["CBSE", "ICSE", "CBSE", " "]},
        )
        client.post(
            f"{API}/option-categories",
            headers=admin_headers,
            json={"key": "hidden", "label": "Hidden", "options": ["x"], "is_active": False},
        )

        response = client.get(f"{API}/meta/options")

        assert response.status_code == 200
        options = response.json()["options"]
        assert options == {"board": {"label": "Board", "options": ["CBSE", "ICSE"], "linked_to": None}}

    def test_option_key_pattern(self, client: TestClient, admin_headers: Dict[str, str]) -> None:
        response = client.post(
            f"{API}/option-categories",
            headers=admin_headers,
            json={"key": "bad key!", "label": "Bad"},
        )
        assert response.status_code == 422


class TestSubjectMappingRoutes:
    def test_create_and_filter(self, client: TestClient, admin_headers: Dict[str, str]) -> None:
        created = client.post(
            f"{API}/subject-mappings",
            headers=admin_headers,
            json={
                "track": "school",
                "category": "board",
                "category_value": "CBSE",
                "subjects": ["Maths", "Science"],
            },
        )
        assert created.status_code == 201, created.text

        school = client.get(f"{API}/subject-mappings", params={"track": "school"}).json()
        assert [item["subjects"] for item in school] == [["Maths", "Science"]]

        college = client.get(f"{API}/subject-mappings", params={"track": "college"}).json()
        assert college == []

        deleted = client.delete(
            f"{API}/subject-mappings/{created.json()['id']}", headers=admin_headers
        )
        assert deleted.status_code == 204

    def test_unknown_track_is_rejected(self, client: TestClient, admin_headers: Dict[str, str]) -> None:
        response = client.post(
            f"{API}/subject-mappings",
            headers=admin_headers,
            json={"track": "kindergarten", "category": "board", "category_value": "CBSE"},
        )
        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"
