import mongomock
import pytest
from fastapi.testclient import TestClient

import database
from config import settings
from main import app


@pytest.fixture
def db(monkeypatch):
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)
    database.set_db(mongomock.MongoClient().school_test)
    yield database.get_db()
    database.set_db(None)


@pytest.fixture
def client(db):
    with TestClient(app) as c:
        yield c


class Seed:
    """Creates records through the API and returns the response bodies."""

    def __init__(self, client):
        self.client = client

    def post(self, path, body):
        response = self.client.post(path, json=body)
        assert response.status_code == 201, response.text
        return response.json()

    def year(self, name="2025/2026", active=True):
        return self.post("/api/academicyear", {
            "name": name,
            "startDate": "2025-09-01T00:00:00",
            "endDate": "2026-06-30T00:00:00",
            "isActive": active,
        })

    def faculty(self, name="Engineering"):
        return self.post("/api/faculty", {"name": name})

    def department(self, name="Computer Science", faculty_id=None):
        body = {"name": name, "departmentMode": "regular", "studentCount": 0}
        if faculty_id:
            body["facultyId"] = faculty_id
        return self.post("/api/department", body)

    def teacher(self, name="Amina Noor", email="amina@school.edu"):
        return self.post("/api/users", {
            "FullName": name,
            "Email": email,
            "password": "secret-pass",
            "phone": "0611000000",
            "Title": "teacher",
        })

    def klass(self, department_id, semester=1, type_="A"):
        return self.post("/api/classes", {
            "departmentId": department_id,
            "semester": semester,
            "classMode": "full time",
            "type": type_,
        })

    def course(self, department_id, teacher_id, name="Data Structures", code="CS201"):
        return self.post("/api/courses", {
            "courseName": name,
            "code": code,
            "semester": 1,
            "departmentId": department_id,
            "teacherId": teacher_id,
        })

    def student(self, class_id, number, name=None, parent_phone="0615000000"):
        return self.post("/api/student", {
            "name": name or f"Student {number}",
            "parentPhone": parent_phone,
            "studentId": number,
            "classId": class_id,
            "gender": "Female",
        })

    def exam_type(self, name="final", marks=100):
        return self.post("/api/exam-types", {"name": name, "marks": marks})

    def school(self):
        """A year, department, class, teacher and course ready for students."""
        year = self.year()
        department = self.department()
        klass = self.klass(department["_id"])
        teacher = self.teacher()
        course = self.course(department["_id"], teacher["_id"])
        return {"year": year, "department": department, "class": klass, "teacher": teacher, "course": course}


@pytest.fixture
def seed(client):
    return Seed(client)
