"""
Bulk upload of exams and students.

Rows are validated one by one; failing rows are reported by index and left
out, the rest are inserted as a single batch.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

from bson import ObjectId

from database import get_db, prepare

logger = logging.getLogger(__name__)

STUDENT_STATUSES = ("active", "inactive")
GENDERS = ("Male", "Female")
WHOLE_NUMBER = re.compile(r"^(-?\d+)(?:\.0*)?$")


def student_number(value: Any) -> Optional[int]:
    """External student numbers arrive as ints or numeric strings from spreadsheets."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        match = WHOLE_NUMBER.match(value.strip())
        return int(match.group(1)) if match else None
    return None


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if number != number else number


def _object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def _date(value: Any) -> Tuple[Optional[datetime], bool]:
    if value in (None, ""):
        return datetime.now(timezone.utc), True
    if isinstance(value, datetime):
        return value, True
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")), True
    except ValueError:
        return None, False


def _stamp(rows: List[dict]) -> List[dict]:
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    stamped = []
    for row in rows:
        doc = prepare(row)
        doc["createdAt"] = now
        doc["updatedAt"] = now
        stamped.append(doc)
    return stamped


def _result(collection: str, valid: List[dict], errors: List[dict]) -> dict:
    inserted_count = 0
    if valid:
        result = get_db()[collection].insert_many(_stamp(valid))
        inserted_count = len(result.inserted_ids)
    logger.info("Bulk %s upload: %d inserted, %d rejected", collection, inserted_count, len(errors))
    return {
        "message": "Bulk upload processed",
        "insertedCount": inserted_count,
        "errorCount": len(errors),
        "errors": errors,
    }


def validate_exam_row(row: Any, students: dict) -> Tuple[Optional[dict], List[str]]:
    """Check one exam row against the ``student number -> _id`` map."""
    if not isinstance(row, dict):
        return None, ["Row must be an object"]
    errors = []
    number = student_number(row.get("studentId"))
    student_id = None
    if row.get("studentId") in (None, ""):
        errors.append("Missing studentId")
    else:
        student_id = students.get(number)
        if student_id is None:
            errors.append(f"Student not found: {row.get('studentId')}")

    exam_type_id = _object_id(row.get("examTypeId"))
    if exam_type_id is None:
        errors.append("Invalid examTypeId")
    course_id = _object_id(row.get("courseId"))
    if course_id is None:
        errors.append("Invalid courseId")

    marks = _number(row.get("marksObtained"))
    if marks is None or marks < 0:
        errors.append("Invalid marks obtained")

    date, ok = _date(row.get("date"))
    if not ok:
        errors.append("Invalid date")

    if errors:
        return None, errors
    return {
        "studentId": student_id,
        "examTypeId": exam_type_id,
        "courseId": course_id,
        "marksObtained": marks,
        "date": date,
    }, []


def upload_exams(rows: List[Any]) -> dict:
    numbers = [student_number(r.get("studentId")) for r in rows if isinstance(r, dict)]
    numbers = [n for n in numbers if n is not None]
    students = {
        s["studentId"]: s["_id"]
        for s in get_db()["student"].find({"studentId": {"$in": numbers}}, {"studentId": 1})
    }

    valid, errors = [], []
    for index, row in enumerate(rows):
        exam, row_errors = validate_exam_row(row, students)
        if row_errors:
            errors.append({
                "index": index,
                "studentId": row.get("studentId") if isinstance(row, dict) else None,
                "errors": row_errors,
            })
        else:
            valid.append(exam)
    return _result("exam", valid, errors)


def validate_student_row(row: Any, classes: set, taken: set) -> Tuple[Optional[dict], List[str]]:
    """Check one student row; ``taken`` holds student numbers already in use."""
    if not isinstance(row, dict):
        return None, ["Row must be an object"]
    errors = []
    for field in ("name", "parentPhone", "studentId", "classId"):
        if row.get(field) in (None, ""):
            errors.append(f"Missing {field}")

    number = student_number(row.get("studentId"))
    if row.get("studentId") not in (None, ""):
        if number is None:
            errors.append("studentId must be numeric")
        elif number in taken:
            errors.append(f"Student ID already exists: {number}")

    class_id = _object_id(row.get("classId"))
    if row.get("classId") not in (None, ""):
        if class_id is None:
            errors.append("Invalid classId")
        elif class_id not in classes:
            errors.append(f"Class not found: {row.get('classId')}")

    status = row.get("status")
    status = status.strip().lower() if isinstance(status, str) and status.strip() else "active"
    if status not in STUDENT_STATUSES:
        errors.append(f"Invalid status: {row.get('status')}")

    gender = row.get("gender") or None
    if gender is not None and gender not in GENDERS:
        errors.append(f"Invalid gender: {gender}")

    if errors:
        return None, errors
    return {
        "name": str(row["name"]).strip(),
        "gender": gender,
        "parentPhone": str(row["parentPhone"]).strip(),
        "phone": str(row["phone"]).strip() if row.get("phone") else None,
        "studentId": number,
        "passcode": str(row.get("passcode") or "1234"),
        "status": status,
        "classId": class_id,
    }, []


def upload_students(rows: List[Any]) -> dict:
    db = get_db()
    numbers = [student_number(r.get("studentId")) for r in rows if isinstance(r, dict)]
    numbers = [n for n in numbers if n is not None]
    taken = {s["studentId"] for s in db["student"].find({"studentId": {"$in": numbers}}, {"studentId": 1})}

    class_ids = [_object_id(r.get("classId")) for r in rows if isinstance(r, dict)]
    class_ids = [c for c in class_ids if c is not None]
    classes = {c["_id"] for c in db["class"].find({"_id": {"$in": class_ids}}, {"_id": 1})}

    valid, errors = [], []
    for index, row in enumerate(rows):
        student, row_errors = validate_student_row(row, classes, taken)
        if row_errors:
            errors.append({
                "index": index,
                "studentId": row.get("studentId") if isinstance(row, dict) else None,
                "errors": row_errors,
            })
        else:
            taken.add(student["studentId"])
            valid.append(student)
    return _result("student", valid, errors)
