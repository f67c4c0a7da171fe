from datetime import datetime, timedelta, timezone

from bson import ObjectId

from reports import attendance_stats, exam_stats, fee_stats, js_round, student_attendance_totals, today_bounds


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def test_js_round_rounds_halves_up():
    assert js_round(2.5) == 3
    assert js_round(66.666) == 67
    assert js_round(0.4) == 0


def test_average_attendance():
    records = [{"isPresent": i < 6} for i in range(10)]
    assert attendance_stats(records)["averageAttendance"] == 60


def test_attendance_counts_only_today():
    now = datetime(2025, 3, 10, 12, 0)
    start, _ = today_bounds(now)
    records = [
        {"isPresent": True, "date": start + timedelta(hours=1)},
        {"isPresent": False, "date": start + timedelta(hours=2)},
        {"isPresent": True, "date": start - timedelta(hours=1)},
        {"isPresent": True},
    ]
    stats = attendance_stats(records, now=now)
    assert stats["presentToday"] == 1
    assert stats["absentToday"] == 1
    assert stats["averageAttendance"] == 75


def test_exam_stats():
    records = [{"marksObtained": m} for m in (40, 60, 80)]
    assert exam_stats(records) == {
        "averageMarks": 60,
        "highestMarks": 80,
        "lowestMarks": 40,
        "passRate": 67,
    }


def test_stats_default_to_zero_without_records():
    assert attendance_stats([]) == {"averageAttendance": 0, "presentToday": 0, "absentToday": 0}
    assert exam_stats([]) == {"averageMarks": 0, "highestMarks": 0, "lowestMarks": 0, "passRate": 0}
    assert fee_stats([]) == {"totalFees": 0, "collectedFees": 0, "pendingFees": 0, "defaulters": 0}
    assert student_attendance_totals([])["percentage"] == 0


def test_fee_stats():
    fees = [
        {"amount": 100, "amountPaid": 100, "status": "paid"},
        {"amount": 100, "amountPaid": 0, "status": "unpaid"},
    ]
    assert fee_stats(fees) == {"totalFees": 200, "collectedFees": 100, "pendingFees": 100, "defaulters": 1}


def _insert_attendance(db, students, class_id, course_id, present_flags, date=None):
    rows = []
    for i, present in enumerate(present_flags):
        rows.append({
            "studentId": ObjectId(students[i % len(students)]["_id"]),
            "classId": ObjectId(class_id),
            "courseId": ObjectId(course_id),
            "isPresent": present,
            "date": date or _utcnow() - timedelta(days=30),
        })
    db["attendance"].insert_many(rows)


def test_class_report(seed, client, db):
    school = seed.school()
    class_id = school["class"]["_id"]
    course_id = school["course"]["_id"]
    students = [seed.student(class_id, 1000 + i) for i in range(3)]
    _insert_attendance(db, students, class_id, course_id, [True] * 6 + [False] * 4)
    _insert_attendance(db, students, class_id, course_id, [True, False], date=_utcnow())

    exam_type = seed.exam_type()
    for student, marks in zip(students, (40, 60, 80)):
        seed.post("/api/exams", {
            "studentId": student["_id"],
            "examTypeId": exam_type["_id"],
            "courseId": course_id,
            "marksObtained": marks,
            "date": "2025-11-01T09:00:00",
        })
    seed.post("/api/fees", {"studentId": students[0]["_id"], "financeType": "tuition", "amount": 100, "amountPaid": 100})
    seed.post("/api/fees", {"studentId": students[1]["_id"], "financeType": "tuition", "amount": 100, "amountPaid": 0})

    response = client.get(f"/api/reports/class-report/{class_id}")

    assert response.status_code == 200
    report = response.json()
    assert report["class"]["_id"] == class_id
    assert len(report["students"]) == 3
    assert "passcode" not in report["students"][0]
    assert report["attendanceStats"] == {
        "totalStudents": 3,
        "averageAttendance": 58,
        "presentToday": 1,
        "absentToday": 1,
    }
    assert report["examStats"] == {"averageMarks": 60, "highestMarks": 80, "lowestMarks": 40, "passRate": 67}
    assert report["feeStats"] == {"totalFees": 200, "collectedFees": 100, "pendingFees": 100, "defaulters": 1}


def test_class_report_attendance_average(seed, client, db):
    school = seed.school()
    class_id = school["class"]["_id"]
    students = [seed.student(class_id, 1000 + i) for i in range(3)]
    _insert_attendance(db, students, class_id, school["course"]["_id"], [True] * 6 + [False] * 4)

    report = client.get(f"/api/reports/class-report/{class_id}").json()

    assert report["attendanceStats"]["averageAttendance"] == 60


def test_class_report_for_empty_class(seed, client):
    school = seed.school()

    report = client.get(f"/api/reports/class-report/{school['class']['_id']}").json()

    assert report["students"] == []
    assert report["attendanceStats"]["totalStudents"] == 0
    assert report["examStats"]["passRate"] == 0
    assert report["feeStats"]["defaulters"] == 0


def test_class_report_errors(client):
    assert client.get("/api/reports/class-report/not-an-id").status_code == 400
    response = client.get(f"/api/reports/class-report/{ObjectId()}")
    assert response.status_code == 404
    assert response.json() == {"error": "Class not found"}


def test_student_report_resolves_both_identifiers(seed, client, db):
    school = seed.school()
    student = seed.student(school["class"]["_id"], 4521)
    _insert_attendance(db, [student], school["class"]["_id"], school["course"]["_id"], [True, True, False])

    by_number = client.get("/api/reports/student-report/4521")
    by_key = client.get(f"/api/reports/student-report/{student['_id']}")

    assert by_number.status_code == 200
    assert by_key.status_code == 200
    assert by_number.json()["student"]["_id"] == by_key.json()["student"]["_id"] == student["_id"]
    report = by_key.json()
    assert report["student"]["classId"]["semester"] == 1
    assert report["student"]["className"] == "1-A (full time)"
    assert len(report["attendanceHistory"]) == 3
    assert report["attendanceStats"] == {"totalDays": 3, "presentDays": 2, "absentDays": 1, "percentage": 67}


def test_student_report_without_records(seed, client):
    school = seed.school()
    seed.student(school["class"]["_id"], 77)

    report = client.get("/api/reports/student-report/77").json()

    assert report["attendanceStats"] == {"totalDays": 0, "presentDays": 0, "absentDays": 0, "percentage": 0}
    assert report["examHistory"] == []
    assert report["feeHistory"] == []


def test_student_report_errors(client):
    assert client.get("/api/reports/student-report/abc").status_code == 400
    response = client.get("/api/reports/student-report/999")
    assert response.status_code == 404
    assert response.json() == {"error": "Student not found"}


def test_fee_report_filters_by_class_and_summarises(seed, client):
    school = seed.school()
    other_class = seed.klass(school["department"]["_id"], semester=2, type_="B")
    inside = seed.student(school["class"]["_id"], 1)
    outside = seed.student(other_class["_id"], 2)
    seed.post("/api/fees", {"studentId": inside["_id"], "financeType": "tuition", "amount": 100, "amountPaid": 100})
    seed.post("/api/fees", {"studentId": inside["_id"], "financeType": "library", "amount": 50, "amountPaid": 20})
    seed.post("/api/fees", {"studentId": outside["_id"], "financeType": "tuition", "amount": 100, "amountPaid": 0})

    response = client.get("/api/reports/fee-report", params={"classId": school["class"]["_id"]})

    assert response.status_code == 200
    report = response.json()
    assert len(report["fees"]) == 2
    assert report["summary"] == {
        "totalAmount": 150,
        "totalPaid": 120,
        "totalPending": 30,
        "paidCount": 1,
        "partialCount": 1,
        "unpaidCount": 0,
    }


def test_fee_report_student_and_class_combine(seed, client):
    school = seed.school()
    other_class = seed.klass(school["department"]["_id"], semester=2, type_="B")
    student = seed.student(school["class"]["_id"], 1)
    seed.post("/api/fees", {"studentId": student["_id"], "financeType": "tuition", "amount": 100, "amountPaid": 0})

    elsewhere = client.get("/api/reports/fee-report", params={
        "studentId": student["_id"],
        "classId": other_class["_id"],
    }).json()
    own_class = client.get("/api/reports/fee-report", params={
        "studentId": student["_id"],
        "classId": school["class"]["_id"],
    }).json()

    assert elsewhere["fees"] == []
    assert elsewhere["summary"]["totalAmount"] == 0
    assert len(own_class["fees"]) == 1


def test_fee_report_date_range(seed, client):
    school = seed.school()
    student = seed.student(school["class"]["_id"], 1)
    seed.post("/api/fees", {"studentId": student["_id"], "financeType": "tuition", "amount": 100,
                            "amountPaid": 0, "date": "2025-01-15T00:00:00"})
    seed.post("/api/fees", {"studentId": student["_id"], "financeType": "tuition", "amount": 40,
                            "amountPaid": 0, "date": "2025-03-15T00:00:00"})

    report = client.get("/api/reports/fee-report", params={
        "startDate": "2025-01-01T00:00:00",
        "endDate": "2025-01-31T23:59:59",
    }).json()

    assert [f["amount"] for f in report["fees"]] == [100]
    assert report["summary"]["unpaidCount"] == 1


def test_student_report_number_forms(seed, client):
    school = seed.school()
    student = seed.student(school["class"]["_id"], 1000)

    assert client.get("/api/reports/student-report/1000.0").json()["student"]["_id"] == student["_id"]
    assert client.get("/api/reports/student-report/1_000").status_code == 400
    assert client.get("/api/reports/student-report/1000.5").status_code == 400
