"""CRUD routes for the plain collections and their extras."""

import pytest
from fastapi.testclient import TestClient

from campus_portal.api.fastapi import create_app

EXAM = {"title": "Midterm", "course": "CS101", "date": "2024-03-01", "time": "10:00"}
COURSE = {"name": "Algorithms", "time": "Mon 9:00", "description": "Intro", "instructor": "Knuth"}
SCHEDULE = {"title": "Lab", "date": "2024-03-02", "time": "14:00"}


class TestCrud:
    def test_create_list_get(self, client):
        created = client.post("/schedules", json=SCHEDULE)

        assert created.status_code == 200
        record = created.json()
        assert record == {"id": record["id"], **SCHEDULE}
        assert client.get("/schedules").json() == [record]
        assert client.get(f"/schedules/{record['id']}").json() == record

    def test_unknown_fields_are_dropped(self, client):
        record = client.post("/courses", json={**COURSE, "extra": "x", "id": 5}).json()

        assert "extra" not in record
        assert record["id"] != 5

    def test_missing_fields(self, client):
        res = client.post("/courses", json={"name": "Algorithms"})

        assert res.status_code == 400
        assert client.get("/courses").json() == []

    def test_ids_are_unique(self, client):
        ids = {client.post("/schedules", json=SCHEDULE).json()["id"] for _ in range(10)}

        assert len(ids) == 10

    def test_update_ignores_empty_values(self, client):
        record = client.post("/courses", json=COURSE).json()

        res = client.put(f"/courses/{record['id']}", json={"name": "Data Structures", "instructor": ""})

        assert res.status_code == 200
        assert res.json()["name"] == "Data Structures"
        assert res.json()["instructor"] == "Knuth"

    def test_delete(self, client):
        record = client.post("/courses", json=COURSE).json()

        res = client.delete(f"/courses/{record['id']}")

        assert res.status_code == 200
        assert res.json() == {"message": "Course deleted"}
        assert client.get("/courses").json() == []

    @pytest.mark.parametrize("method", ["get", "put", "delete"])
    def test_unknown_id_is_404(self, client, method):
        kwargs = {"json": COURSE} if method == "put" else {}

        res = getattr(client, method)("/courses/123", **kwargs)

        assert res.status_code == 404
        assert res.json() == {"message": "Course not found"}

    def test_non_integer_id_is_400(self, client):
        res = client.get("/courses/abc")

        assert res.status_code == 400

    def test_state_survives_restart(self, client, portal_settings, auth_settings):
        record = client.post("/courses", json=COURSE).json()

        with TestClient(create_app(settings=portal_settings, auth_settings=auth_settings)) as fresh:
            assert fresh.get("/courses").json() == [record]


class TestForumAndCalendar:
    def test_forum_post_is_201_with_timestamp(self, client):
        res = client.post("/forum", json={"content": "Hello", "user": "ana"})

        assert res.status_code == 201
        assert res.json()["createdAt"].endswith("Z")

    def test_calendar_event_defaults_description(self, client):
        res = client.post("/calendar", json={"date": "2024-05-01", "title": "Holiday", "user": "ana"})

        assert res.status_code == 201
        assert res.json()["description"] == ""

    def test_calendar_by_date(self, client):
        first = client.post("/calendar", json={"date": "2024-05-01", "title": "A", "user": "ana"}).json()
        client.post("/calendar", json={"date": "2024-05-02", "title": "B", "user": "ana"})

        res = client.get("/calendar/date/2024-05-01")

        assert res.json() == [first]
        assert client.get("/calendar/date/2030-01-01").json() == []


class TestExamsAndQuestions:
    def test_questions_of_exam(self, client):
        exam = client.post("/exams", json=EXAM).json()
        other = client.post("/exams", json=EXAM).json()
        question = client.post("/questions", json={"exam_id": str(exam["id"]), "question": "2+2?"}).json()
        client.post("/questions", json={"exam_id": other["id"], "question": "3+3?"})

        assert question["exam_id"] == exam["id"]
        assert client.get(f"/exams/{exam['id']}/questions").json() == [question]

    def test_question_for_missing_exam(self, client):
        res = client.post("/questions", json={"exam_id": 999, "question": "?"})

        assert res.status_code == 404

    def test_only_question_text_is_updatable(self, client):
        exam = client.post("/exams", json=EXAM).json()
        other = client.post("/exams", json=EXAM).json()
        question = client.post("/questions", json={"exam_id": exam["id"], "question": "old"}).json()

        res = client.put(f"/questions/{question['id']}", json={"question": "new", "exam_id": other["id"]})

        assert res.json()["question"] == "new"
        assert res.json()["exam_id"] == exam["id"]

    def test_questions_have_no_list_route(self, client):
        assert client.get("/questions").status_code in (404, 405)

    def test_deleting_exam_removes_its_questions(self, client):
        exam = client.post("/exams", json=EXAM).json()
        other = client.post("/exams", json=EXAM).json()
        doomed = client.post("/questions", json={"exam_id": exam["id"], "question": "a"}).json()
        kept = client.post("/questions", json={"exam_id": other["id"], "question": "b"}).json()

        assert client.delete(f"/exams/{exam['id']}").json() == {"message": "Exam deleted"}

        assert client.get(f"/questions/{doomed['id']}").status_code == 404
        assert client.get(f"/questions/{kept['id']}").status_code == 200
        assert client.get(f"/exams/{exam['id']}/questions").json() == []


def test_unknown_route_uses_message_body(client):
    res = client.get("/nope/at/all")

    assert res.status_code == 404
    assert "message" in res.json()
