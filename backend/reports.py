"""
Aggregate reports over attendance, exam and fee records.

The ``*_stats`` helpers are pure and work on lists of stored documents; the
``*_report`` functions fetch what they need and assemble the response body.
Every rate falls back to 0 when there is nothing to divide by.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from bson import ObjectId

from config import settings
from database import get_db
from errors import InvalidId, NotFound
from fees import summarize_fees
from references import get_or_404, parse_object_id, populate, populate_many
from uploads import student_number

logger = logging.getLogger(__name__)

STUDENT_FIELDS = {"_id": 1, "studentId": 1, "name": 1, "phone": 1, "parentPhone": 1, "status": 1}


def js_round(value: float) -> int:
    # Math.round: halves go up
    return int(math.floor(value + 0.5))


def percentage(part: float, whole: float) -> int:
    return js_round(part / whole * 100) if whole else 0


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def today_bounds(now: Optional[datetime] = None):
    """Local midnight to 23:59:59.999 today, as naive UTC like stored dates."""
    now = (now or datetime.now()).astimezone()
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end = now.replace(hour=23, minute=59, second=59, microsecond=999000)
    return _as_utc(start), _as_utc(end)


def attendance_stats(records: List[dict], now: Optional[datetime] = None) -> dict:
    present = sum(1 for r in records if r.get("isPresent"))
    start, end = today_bounds(now)
    today = [
        r for r in records
        if isinstance(r.get("date"), datetime) and start <= _as_utc(r["date"]) <= end
    ]
    present_today = sum(1 for r in today if r.get("isPresent"))
    return {
        "averageAttendance": percentage(present, len(records)),
        "presentToday": present_today,
        "absentToday": len(today) - present_today,
    }


def exam_stats(records: List[dict], pass_mark: Optional[float] = None) -> dict:
    pass_mark = settings.PASS_MARK if pass_mark is None else pass_mark
    marks = [r.get("marksObtained", 0) for r in records]
    if not marks:
        return {"averageMarks": 0, "highestMarks": 0, "lowestMarks": 0, "passRate": 0}
    passed = sum(1 for m in marks if m >= pass_mark)
    return {
        "averageMarks": js_round(sum(marks) / len(marks)),
        "highestMarks": max(marks),
        "lowestMarks": min(marks),
        "passRate": percentage(passed, len(marks)),
    }


def fee_stats(records: Iterable[dict]) -> dict:
    summary = summarize_fees(records)
    return {
        "totalFees": summary["totalAmount"],
        "collectedFees": summary["totalPaid"],
        "pendingFees": summary["totalPending"],
        "defaulters": summary["unpaidCount"],
    }


def student_attendance_totals(records: List[dict]) -> dict:
    present = sum(1 for r in records if r.get("isPresent"))
    return {
        "totalDays": len(records),
        "presentDays": present,
        "absentDays": len(records) - present,
        "percentage": percentage(present, len(records)),
    }


def class_label(cls: Optional[dict]) -> Optional[str]:
    if not cls:
        return None
    return f"{cls.get('semester')}-{cls.get('type')} ({cls.get('classMode')})"


def class_report(class_id: str) -> dict:
    if not ObjectId.is_valid(class_id):
        raise InvalidId("Invalid class ID")
    cls = get_or_404("class", class_id, "Class")
    db = get_db()
    students = list(db["student"].find({"classId": cls["_id"]}, STUDENT_FIELDS))
    student_ids = [s["_id"] for s in students]
    query = {"studentId": {"$in": student_ids}}

    attendance = list(db["attendance"].find(query)) if student_ids else []
    exams = list(db["exam"].find(query)) if student_ids else []
    fees = list(db["fee"].find(query)) if student_ids else []

    logger.info("Class report for %s: %d students", class_id, len(students))
    return {
        "class": cls,
        "students": students,
        "attendanceStats": {"totalStudents": len(students), **attendance_stats(attendance)},
        "examStats": exam_stats(exams),
        "feeStats": fee_stats(fees),
    }


def _student_lookup(identifier: str) -> dict:
    conditions = []
    if ObjectId.is_valid(identifier):
        conditions.append({"_id": ObjectId(identifier)})
    number = student_number(identifier)
    if number is not None:
        conditions.append({"studentId": number})
    if not conditions:
        raise InvalidId("Invalid student ID")
    return {"$or": conditions}


def student_report(identifier: str) -> dict:
    db = get_db()
    student = db["student"].find_one(_student_lookup(identifier))
    if student is None:
        raise NotFound("Student", identifier)
    populate([student], "classId", ["classMode", "type", "semester"])
    student["className"] = class_label(student.get("classId"))

    query = {"studentId": student["_id"]}
    attendance = list(db["attendance"].find(query).sort("date", -1))
    exams = list(db["exam"].find(query).sort("date", -1))
    fees = list(db["fee"].find(query).sort("date", -1))
    return {
        "student": student,
        "attendanceHistory": attendance,
        "examHistory": exams,
        "feeHistory": fees,
        "attendanceStats": student_attendance_totals(attendance),
    }


def fee_report(student_id: Optional[str] = None, class_id: Optional[str] = None,
               start_date: Optional[datetime] = None, end_date: Optional[datetime] = None) -> dict:
    query: dict = {}
    ids = None
    if class_id:
        cls = get_or_404("class", class_id, "Class")
        ids = [s["_id"] for s in get_db()["student"].find({"classId": cls["_id"]}, {"_id": 1})]
    if student_id:
        oid = parse_object_id(student_id, "student ID")
        ids = [oid] if ids is None or oid in ids else []
    if ids is not None:
        query["studentId"] = {"$in": ids}
    if start_date or end_date:
        query["date"] = {}
        if start_date:
            query["date"]["$gte"] = _as_utc(start_date)
        if end_date:
            query["date"]["$lte"] = _as_utc(end_date)

    fees = list(get_db()["fee"].find(query).sort("date", -1))
    populate_many(fees, ("studentId", ["name", "studentId"]))
    return {"fees": fees, "summary": summarize_fees(fees)}
