import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo import ReturnDocument
from pymongo.errors import BulkWriteError, DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

import academic_years
import reports
import uploads
from config import configure_logging, settings
from database import close_db, create_document, get_db, get_documents, prepare, serialize
from errors import AppError, Conflict, InvalidInput, NotFound, Unauthorized
from fees import apply_fee_status
from references import get_or_404, parse_object_id, populate, populate_many, resolve_references
from schemas import (
    Academicyear as AcademicyearSchema,
    AcademicyearUpdate,
    Attendance as AttendanceSchema,
    AttendanceUpdate,
    Class as ClassSchema,
    ClassCreate,
    ClassUpdate,
    Course as CourseSchema,
    CourseUpdate,
    Department as DepartmentSchema,
    DepartmentUpdate,
    Exam as ExamSchema,
    ExamUpdate,
    Examtype as ExamtypeSchema,
    ExamtypeUpdate,
    Faculty as FacultySchema,
    FacultyUpdate,
    Fee as FeeSchema,
    FeeCreate,
    FeeUpdate,
    LoginRequest,
    Student as StudentSchema,
    StudentUpdate,
    User as UserSchema,
    UserCreate,
    UserUpdate,
)
from security import hash_password, verify_password

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield
    close_db()


app = FastAPI(title="School Administration API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def root():
    return {"message": "School Administration API running"}


# ---------- Error handling ----------
@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        messages.append(f"{'.'.join(loc)}: {err.get('msg')}" if loc else err.get("msg", "Invalid input"))
    return JSONResponse({"error": "; ".join(messages) or "Invalid input"}, status_code=400)


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


@app.exception_handler(DuplicateKeyError)
@app.exception_handler(BulkWriteError)
async def handle_duplicate_key(request: Request, exc: Exception):
    logger.warning("Duplicate key on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse({"error": "A record with the same unique value already exists"}, status_code=400)


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


# ---------- Helpers ----------
def _collection(name: str):
    return get_db()[name]


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _changes(payload) -> dict:
    changes = payload.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    if not changes:
        raise InvalidInput("No changes supplied")
    return changes


def _find(collection: str, id: str, label: str) -> dict:
    return get_or_404(collection, id, label)


def _insert(collection: str, doc: dict) -> dict:
    inserted_id = create_document(collection, doc)
    created = _collection(collection).find_one({"_id": parse_object_id(inserted_id)})
    logger.info("Created %s %s", collection, inserted_id)
    return created


def _update(collection: str, id: str, label: str, changes: dict) -> dict:
    oid = parse_object_id(id, f"{label.lower()} ID")
    changes = prepare(changes)
    changes["updatedAt"] = _now()
    updated = _collection(collection).find_one_and_update(
        {"_id": oid}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    if updated is None:
        raise NotFound(label, id)
    logger.info("Updated %s %s", collection, id)
    return updated


def _delete(collection: str, id: str, label: str) -> dict:
    oid = parse_object_id(id, f"{label.lower()} ID")
    result = _collection(collection).delete_one({"_id": oid})
    if result.deleted_count == 0:
        raise NotFound(label, id)
    logger.info("Deleted %s %s", collection, id)
    return {"message": f"{label} deleted successfully"}


def _filters(**params) -> dict:
    filt = {}
    for field, value in params.items():
        if value is None:
            continue
        filt[field] = parse_object_id(value, field) if field.endswith("Id") else value
    return filt


# ---------- Academic years ----------
@app.get("/api/academicyear")
def list_academic_years():
    return serialize(get_documents("academicyear", {}, sort=[("startDate", -1)]))


@app.get("/api/academicyear/active")
def get_active_academic_year():
    year = academic_years.get_active_year()
    if year is None:
        raise NotFound("Active academic year")
    return serialize(year)


@app.get("/api/academicyear/{year_id}")
def get_academic_year(year_id: str):
    return serialize(_find("academicyear", year_id, "Academic year"))


@app.post("/api/academicyear", status_code=201)
def create_academic_year(year: AcademicyearSchema):
    if year.is_active:
        academic_years.ensure_no_other_active()
    if _collection("academicyear").find_one({"name": year.name}, {"_id": 1}):
        raise Conflict("Academic year name already exists")
    return serialize(_insert("academicyear", year.model_dump(by_alias=True)))


@app.put("/api/academicyear/{year_id}")
def update_academic_year(year_id: str, payload: AcademicyearUpdate):
    oid = parse_object_id(year_id, "academic year ID")
    changes = _changes(payload)
    if "startDate" in changes or "endDate" in changes:
        merged = {**_find("academicyear", year_id, "Academic year"), **prepare(changes)}
        if merged.get("startDate") and merged.get("endDate") and merged["endDate"] < merged["startDate"]:
            raise InvalidInput("endDate must not be before startDate")
    if changes.get("isActive"):
        academic_years.ensure_no_other_active(exclude_id=oid)
    if "name" in changes and _collection("academicyear").find_one({"name": changes["name"], "_id": {"$ne": oid}}, {"_id": 1}):
        raise Conflict("Academic year name already exists")
    return serialize(_update("academicyear", year_id, "Academic year", changes))


@app.post("/api/academicyear/{year_id}/activate")
def activate_academic_year(year_id: str):
    return serialize(academic_years.activate(year_id))


@app.delete("/api/academicyear/{year_id}")
def delete_academic_year(year_id: str):
    return _delete("academicyear", year_id, "Academic year")


# ---------- Faculties ----------
@app.get("/api/faculty")
def list_faculties():
    return serialize(get_documents("faculty", {}, sort=[("createdAt", -1)]))


@app.get("/api/faculty/{faculty_id}")
def get_faculty(faculty_id: str):
    return serialize(_find("faculty", faculty_id, "Faculty"))


@app.post("/api/faculty", status_code=201)
def create_faculty(faculty: FacultySchema):
    return serialize(_insert("faculty", faculty.model_dump(by_alias=True)))


@app.put("/api/faculty/{faculty_id}")
def update_faculty(faculty_id: str, payload: FacultyUpdate):
    return serialize(_update("faculty", faculty_id, "Faculty", _changes(payload)))


@app.delete("/api/faculty/{faculty_id}")
def delete_faculty(faculty_id: str):
    # departments and classes keep their facultyId; it populates as null afterwards
    return _delete("faculty", faculty_id, "Faculty")


# ---------- Departments ----------
DEPARTMENT_POPULATE = (("facultyId", ["name"]),)


@app.get("/api/department")
def list_departments(facultyId: Optional[str] = None):
    docs = get_documents("department", _filters(facultyId=facultyId), sort=[("createdAt", -1)])
    return serialize(populate_many(docs, *DEPARTMENT_POPULATE))


@app.get("/api/department/{department_id}")
def get_department(department_id: str):
    doc = _find("department", department_id, "Department")
    return serialize(populate_many([doc], *DEPARTMENT_POPULATE)[0])


@app.post("/api/department", status_code=201)
def create_department(department: DepartmentSchema):
    doc = resolve_references(department.model_dump(by_alias=True), ["facultyId"])
    return serialize(populate_many([_insert("department", doc)], *DEPARTMENT_POPULATE)[0])


@app.put("/api/department/{department_id}")
def update_department(department_id: str, payload: DepartmentUpdate):
    parse_object_id(department_id, "department ID")
    changes = resolve_references(_changes(payload), ["facultyId"])
    doc = _update("department", department_id, "Department", changes)
    return serialize(populate_many([doc], *DEPARTMENT_POPULATE)[0])


@app.delete("/api/department/{department_id}")
def delete_department(department_id: str):
    return _delete("department", department_id, "Department")


# ---------- Classes ----------
CLASS_POPULATE = (
    ("facultyId", ["name"]),
    ("departmentId", ["name"]),
    ("academicYearId", ["name", "isActive"]),
)


@app.get("/api/classes")
def list_classes(departmentId: Optional[str] = None, academicYearId: Optional[str] = None,
                 status: Optional[str] = None):
    filt = _filters(departmentId=departmentId, academicYearId=academicYearId, status=status)
    docs = get_documents("class", filt, sort=[("createdAt", -1)])
    return serialize(populate_many(docs, *CLASS_POPULATE))


@app.get("/api/classes/{class_id}")
def get_class(class_id: str):
    doc = _find("class", class_id, "Class")
    return serialize(populate_many([doc], *CLASS_POPULATE)[0])


@app.post("/api/classes", status_code=201)
def create_class(payload: ClassCreate):
    year = academic_years.get_active_year()
    if year is None:
        raise NotFound("Active academic year")
    cls = ClassSchema(**payload.model_dump(), academic_year_id=str(year["_id"]))
    doc = resolve_references(cls.model_dump(by_alias=True), ["departmentId", "facultyId", "academicYearId"])
    return serialize(populate_many([_insert("class", doc)], *CLASS_POPULATE)[0])


@app.put("/api/classes/{class_id}")
def update_class(class_id: str, payload: ClassUpdate):
    parse_object_id(class_id, "class ID")
    changes = resolve_references(_changes(payload), ["departmentId", "facultyId"])
    doc = _update("class", class_id, "Class", changes)
    return serialize(populate_many([doc], *CLASS_POPULATE)[0])


@app.delete("/api/classes/{class_id}")
def delete_class(class_id: str):
    return _delete("class", class_id, "Class")


# ---------- Courses ----------
COURSE_POPULATE = (
    ("departmentId", ["name"]),
    ("teacherId", ["FullName", "Email"]),
)


@app.get("/api/courses")
def list_courses(departmentId: Optional[str] = None, teacherId: Optional[str] = None):
    docs = get_documents("course", _filters(departmentId=departmentId, teacherId=teacherId), sort=[("createdAt", -1)])
    return serialize(populate_many(docs, *COURSE_POPULATE))


@app.get("/api/courses/{course_id}")
def get_course(course_id: str):
    doc = _find("course", course_id, "Course")
    return serialize(populate_many([doc], *COURSE_POPULATE)[0])


@app.post("/api/courses", status_code=201)
def create_course(course: CourseSchema):
    doc = resolve_references(course.model_dump(by_alias=True), ["departmentId", "teacherId"])
    if _collection("course").find_one({"courseName": course.course_name}, {"_id": 1}):
        raise Conflict("Course name already exists")
    return serialize(populate_many([_insert("course", doc)], *COURSE_POPULATE)[0])


@app.put("/api/courses/{course_id}")
def update_course(course_id: str, payload: CourseUpdate):
    oid = parse_object_id(course_id, "course ID")
    changes = resolve_references(_changes(payload), ["departmentId", "teacherId"])
    if "courseName" in changes and _collection("course").find_one(
            {"courseName": changes["courseName"], "_id": {"$ne": oid}}, {"_id": 1}):
        raise Conflict("Course name already exists")
    doc = _update("course", course_id, "Course", changes)
    return serialize(populate_many([doc], *COURSE_POPULATE)[0])


@app.delete("/api/courses/{course_id}")
def delete_course(course_id: str):
    return _delete("course", course_id, "Course")


# ---------- Students ----------
STUDENT_POPULATE = (
    ("facultyId", ["name"]),
    ("classId", ["semester", "type", "classMode", "departmentId"]),
)


def _populate_students(docs):
    populate_many(docs, *STUDENT_POPULATE)
    classes = [d["classId"] for d in docs if isinstance(d.get("classId"), dict)]
    populate(classes, "departmentId", ["name"])
    for d in docs:
        d["className"] = reports.class_label(d.get("classId"))
    return docs


def _ensure_unique_student_number(number: int, exclude_id=None):
    query = {"studentId": number}
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    if _collection("student").find_one(query, {"_id": 1}):
        raise Conflict("Student ID already exists")


@app.get("/api/student")
def list_students(classId: Optional[str] = None, facultyId: Optional[str] = None, status: Optional[str] = None):
    filt = _filters(classId=classId, facultyId=facultyId, status=status)
    return serialize(_populate_students(get_documents("student", filt, sort=[("createdAt", -1)])))


@app.get("/api/student/parent/{phone}")
def list_students_by_parent(phone: str):
    if not phone.strip():
        raise InvalidInput("phone is required")
    return serialize(_populate_students(get_documents("student", {"parentPhone": phone.strip()})))


@app.get("/api/student/{student_id}")
def get_student(student_id: str):
    doc = _find("student", student_id, "Student")
    return serialize(_populate_students([doc])[0])


@app.post("/api/student", status_code=201)
def create_student(student: StudentSchema):
    doc = resolve_references(student.model_dump(by_alias=True), ["classId", "facultyId"])
    _ensure_unique_student_number(student.student_id)
    return serialize(_populate_students([_insert("student", doc)])[0])


@app.post("/api/student/upload")
def upload_students(body: Any = Body(...)):
    rows = body.get("students") if isinstance(body, dict) else body
    if not isinstance(rows, list):
        raise InvalidInput("Expected an array of students")
    result = uploads.upload_students(rows)
    return JSONResponse(serialize(result), status_code=207 if result["errorCount"] else 201)


@app.put("/api/student/{student_id}")
def update_student(student_id: str, payload: StudentUpdate):
    oid = parse_object_id(student_id, "student ID")
    changes = resolve_references(_changes(payload), ["classId", "facultyId"])
    if "studentId" in changes:
        _ensure_unique_student_number(changes["studentId"], exclude_id=oid)
    doc = _update("student", student_id, "Student", changes)
    return serialize(_populate_students([doc])[0])


@app.delete("/api/student/{student_id}")
def delete_student(student_id: str):
    return _delete("student", student_id, "Student")


# ---------- Attendance ----------
ATTENDANCE_POPULATE = (
    ("studentId", ["name", "studentId"]),
    ("classId", ["semester", "type"]),
    ("courseId", ["courseName"]),
)
ATTENDANCE_REFS = ["studentId", "classId", "courseId"]


@app.get("/api/attendances")
def list_attendance(studentId: Optional[str] = None, classId: Optional[str] = None, courseId: Optional[str] = None):
    filt = _filters(studentId=studentId, classId=classId, courseId=courseId)
    docs = get_documents("attendance", filt, sort=[("createdAt", -1)])
    return serialize(populate_many(docs, *ATTENDANCE_POPULATE))


@app.get("/api/attendances/{record_id}")
def get_attendance(record_id: str):
    doc = _find("attendance", record_id, "Attendance record")
    return serialize(populate_many([doc], *ATTENDANCE_POPULATE)[0])


@app.post("/api/attendances", status_code=201)
def create_attendance(record: AttendanceSchema):
    doc = resolve_references(record.model_dump(by_alias=True), ATTENDANCE_REFS)
    return serialize(populate_many([_insert("attendance", doc)], *ATTENDANCE_POPULATE)[0])


@app.put("/api/attendances/{record_id}")
def update_attendance(record_id: str, payload: AttendanceUpdate):
    parse_object_id(record_id, "attendance record ID")
    changes = resolve_references(_changes(payload), ATTENDANCE_REFS)
    doc = _update("attendance", record_id, "Attendance record", changes)
    return serialize(populate_many([doc], *ATTENDANCE_POPULATE)[0])


@app.delete("/api/attendances/{record_id}")
def delete_attendance(record_id: str):
    return _delete("attendance", record_id, "Attendance record")


# ---------- Exam types ----------
@app.get("/api/exam-types")
def list_exam_types():
    return serialize(get_documents("examtype", {}, sort=[("createdAt", -1)]))


@app.get("/api/exam-types/{exam_type_id}")
def get_exam_type(exam_type_id: str):
    return serialize(_find("examtype", exam_type_id, "Exam type"))


@app.post("/api/exam-types", status_code=201)
def create_exam_type(exam_type: ExamtypeSchema):
    return serialize(_insert("examtype", exam_type.model_dump(by_alias=True)))


@app.put("/api/exam-types/{exam_type_id}")
def update_exam_type(exam_type_id: str, payload: ExamtypeUpdate):
    return serialize(_update("examtype", exam_type_id, "Exam type", _changes(payload)))


@app.delete("/api/exam-types/{exam_type_id}")
def delete_exam_type(exam_type_id: str):
    return _delete("examtype", exam_type_id, "Exam type")


# ---------- Exams ----------
EXAM_POPULATE = (
    ("studentId", ["name", "studentId"]),
    ("examTypeId", ["name", "marks"]),
    ("courseId", ["courseName", "code"]),
)
EXAM_REFS = ["studentId", "examTypeId", "courseId"]


@app.get("/api/exams")
def list_exams(studentId: Optional[str] = None, courseId: Optional[str] = None, examTypeId: Optional[str] = None):
    filt = _filters(studentId=studentId, courseId=courseId, examTypeId=examTypeId)
    docs = get_documents("exam", filt, sort=[("createdAt", -1)])
    return serialize(populate_many(docs, *EXAM_POPULATE))


@app.post("/api/exams/upload")
def upload_exams(body: Any = Body(...)):
    rows = body.get("exams") if isinstance(body, dict) else body
    if not isinstance(rows, list):
        raise InvalidInput("Expected array of exam data")
    result = uploads.upload_exams(rows)
    return JSONResponse(serialize(result), status_code=207 if result["errorCount"] else 201)


@app.get("/api/exams/{exam_id}")
def get_exam(exam_id: str):
    doc = _find("exam", exam_id, "Exam")
    return serialize(populate_many([doc], *EXAM_POPULATE)[0])


@app.post("/api/exams", status_code=201)
def create_exam(exam: ExamSchema):
    doc = resolve_references(exam.model_dump(by_alias=True), EXAM_REFS)
    return serialize(populate_many([_insert("exam", doc)], *EXAM_POPULATE)[0])


@app.put("/api/exams/{exam_id}")
def update_exam(exam_id: str, payload: ExamUpdate):
    parse_object_id(exam_id, "exam ID")
    changes = resolve_references(_changes(payload), EXAM_REFS)
    doc = _update("exam", exam_id, "Exam", changes)
    return serialize(populate_many([doc], *EXAM_POPULATE)[0])


@app.delete("/api/exams/{exam_id}")
def delete_exam(exam_id: str):
    return _delete("exam", exam_id, "Exam")


# ---------- Fees ----------
FEE_POPULATE = (("studentId", ["name", "studentId"]),)


@app.get("/api/fees")
def list_fees(studentId: Optional[str] = None, status: Optional[str] = None, financeType: Optional[str] = None):
    filt = _filters(studentId=studentId, status=status, financeType=financeType)
    docs = get_documents("fee", filt, sort=[("createdAt", -1)])
    return serialize(populate_many(docs, *FEE_POPULATE))


@app.get("/api/fees/{fee_id}")
def get_fee(fee_id: str):
    doc = _find("fee", fee_id, "Fee record")
    return serialize(populate_many([doc], *FEE_POPULATE)[0])


@app.post("/api/fees", status_code=201)
def create_fee(payload: FeeCreate):
    fee = FeeSchema(**payload.model_dump(), balance=0)
    doc = resolve_references(apply_fee_status(fee.model_dump(by_alias=True)), ["studentId"])
    return serialize(populate_many([_insert("fee", doc)], *FEE_POPULATE)[0])


@app.put("/api/fees/{fee_id}")
def update_fee(fee_id: str, payload: FeeUpdate):
    existing = _find("fee", fee_id, "Fee record")
    changes = resolve_references(_changes(payload), ["studentId"])
    if "amount" in changes or "amountPaid" in changes:
        merged = {
            "amount": changes.get("amount", existing.get("amount", 0)),
            "amountPaid": changes.get("amountPaid", existing.get("amountPaid", 0)),
        }
        changes.update(apply_fee_status(merged))
    doc = _update("fee", fee_id, "Fee record", changes)
    return serialize(populate_many([doc], *FEE_POPULATE)[0])


@app.delete("/api/fees/{fee_id}")
def delete_fee(fee_id: str):
    return _delete("fee", fee_id, "Fee record")


# ---------- Users ----------
NO_PASSWORD = {"password": 0}


def _ensure_unique_user(email: Optional[str], full_name: Optional[str], exclude_id=None):
    conditions = []
    if email:
        conditions.append({"Email": email})
    if full_name:
        conditions.append({"FullName": full_name})
    if not conditions:
        return
    query = {"$or": conditions}
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    existing = _collection("user").find_one(query, {"Email": 1})
    if existing:
        raise Conflict("Email exists" if email and existing.get("Email") == email else "Name exists")


@app.get("/api/users")
def list_users(Title: Optional[str] = None, Status: Optional[str] = None):
    filt = _filters(Title=Title, Status=Status)
    docs = list(_collection("user").find(filt, NO_PASSWORD).sort("createdAt", -1))
    return serialize(docs)


@app.get("/api/users/{user_id}")
def get_user(user_id: str):
    return serialize(get_or_404("user", user_id, "User", NO_PASSWORD))


@app.post("/api/users", status_code=201)
def create_user(payload: UserCreate):
    _ensure_unique_user(payload.email, payload.full_name)
    user = UserSchema(**payload.model_dump(exclude={"password"}), password=hash_password(payload.password))
    doc = resolve_references(user.model_dump(by_alias=True), ["studentId"])
    created = _insert("user", doc)
    created.pop("password", None)
    return serialize(created)


@app.put("/api/users/{user_id}")
def update_user(user_id: str, payload: UserUpdate):
    oid = parse_object_id(user_id, "user ID")
    changes = resolve_references(_changes(payload), ["studentId"])
    _ensure_unique_user(changes.get("Email"), changes.get("FullName"), exclude_id=oid)
    if "password" in changes:
        changes["password"] = hash_password(changes["password"])
    updated = _update("user", user_id, "User", changes)
    updated.pop("password", None)
    return serialize(updated)


@app.delete("/api/users/{user_id}")
def delete_user(user_id: str):
    return _delete("user", user_id, "User")


@app.post("/api/users/user/login")
def login(payload: LoginRequest):
    user = _collection("user").find_one({"Email": payload.email})
    if not user or not verify_password(payload.password, user.get("password", "")):
        logger.warning("Failed login for %s", payload.email)
        raise Unauthorized("Invalid email or password")
    if user.get("Status") == "inactive":
        logger.warning("Inactive account login attempt for %s", payload.email)
        raise Unauthorized("Account is inactive")
    user.pop("password", None)
    return serialize(user)


# ---------- Reports ----------
@app.get("/api/reports/class-report/{class_id}")
def class_report(class_id: str):
    return serialize(reports.class_report(class_id))


@app.get("/api/reports/student-report/{student_id}")
def student_report(student_id: str):
    return serialize(reports.student_report(student_id))


@app.get("/api/reports/fee-report")
def fee_report(studentId: Optional[str] = None, classId: Optional[str] = None,
               startDate: Optional[datetime] = None, endDate: Optional[datetime] = None):
    return serialize(reports.fee_report(studentId, classId, startDate, endDate))


@app.get("/api/stats")
def stats():
    return {
        "totalStudents": _collection("student").count_documents({}),
        "totalFaculty": _collection("faculty").count_documents({}),
        "totalDepartments": _collection("department").count_documents({}),
        "totalCourses": _collection("course").count_documents({}),
    }


# ---------- Utilities ----------
@app.get("/schema")
def get_schema():
    return {"schemas": ["academicyear", "faculty", "department", "class", "course", "student",
                        "attendance", "examtype", "exam", "fee", "user"]}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if settings.DATABASE_URL else "❌ Not Set",
        "database_name": "✅ Set" if settings.DATABASE_NAME else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": []
    }

    try:
        db = get_db()
        response["connection_status"] = "Connected"
        response["collections"] = db.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
    except AppError as e:
        response["database"] = f"⚠️  {e.message}"
    except Exception as e:
        logger.exception("Database check failed")
        response["database"] = f"❌ Error: {str(e)[:50]}"

    return response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
