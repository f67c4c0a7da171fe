"""
Database Schemas for the School Administration API

Each Pydantic model corresponds to a MongoDB collection (lowercased class name):
- Academicyear -> "academicyear"
- Faculty -> "faculty"
- Department -> "department"
- Class -> "class"
- Course -> "course"
- Student -> "student"
- Attendance -> "attendance"
- Examtype -> "examtype"
- Exam -> "exam"
- Fee -> "fee"
- User -> "user"

Field names are snake_case in Python and camelCase on the wire and in the
database. References to other documents travel as string ids and are stored
as ObjectIds once they have been checked.
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

ClassMode = Literal["full time", "part time"]
ClassType = Literal["A", "B", "C", "D", "E"]
ActiveStatus = Literal["active", "inactive"]
ExamName = Literal["mid term", "final", "quiz"]
FeeStatus = Literal["paid", "partial", "unpaid"]
FinanceType = Literal["tuition", "admission", "registration", "library", "examination", "transportation", "other"]
UserTitle = Literal["parent", "teacher", "officer", "student", "admin"]


class Document(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Academic structure
class Academicyear(Document):
    name: str = Field(..., min_length=1, description="e.g., 2025/2026")
    start_date: datetime
    end_date: datetime
    is_active: bool = False

    @model_validator(mode="after")
    def check_dates(self):
        start, end = (d.astimezone(timezone.utc).replace(tzinfo=None) if d.tzinfo else d
                      for d in (self.start_date, self.end_date))
        if end < start:
            raise ValueError("endDate must not be before startDate")
        return self


class AcademicyearUpdate(Document):
    name: Optional[str] = Field(None, min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None


class Faculty(Document):
    name: str = Field(..., min_length=1)


class FacultyUpdate(Document):
    name: Optional[str] = Field(None, min_length=1)


class Department(Document):
    name: str = Field(..., min_length=1)
    department_mode: str = Field(..., min_length=1)
    student_count: int = Field(0, ge=0)
    faculty_id: Optional[str] = None


class DepartmentUpdate(Document):
    name: Optional[str] = Field(None, min_length=1)
    department_mode: Optional[str] = Field(None, min_length=1)
    student_count: Optional[int] = Field(None, ge=0)
    faculty_id: Optional[str] = None


class ClassCreate(Document):
    department_id: str
    semester: int = Field(..., ge=1, le=8)
    class_mode: ClassMode
    type: ClassType
    status: ActiveStatus = "active"
    faculty_id: Optional[str] = None


class Class(ClassCreate):
    academic_year_id: str = Field(..., description="Active academic year when the class was created")


class ClassUpdate(Document):
    department_id: Optional[str] = None
    semester: Optional[int] = Field(None, ge=1, le=8)
    class_mode: Optional[ClassMode] = None
    type: Optional[ClassType] = None
    status: Optional[ActiveStatus] = None
    faculty_id: Optional[str] = None


class Course(Document):
    course_name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    semester: int = Field(..., ge=1, le=8)
    department_id: str
    teacher_id: str


class CourseUpdate(Document):
    course_name: Optional[str] = Field(None, min_length=1)
    code: Optional[str] = Field(None, min_length=1)
    semester: Optional[int] = Field(None, ge=1, le=8)
    department_id: Optional[str] = None
    teacher_id: Optional[str] = None


# Students and their records
class Student(Document):
    name: str = Field(..., min_length=1)
    parent_phone: str = Field(..., min_length=1)
    student_id: int = Field(..., description="Unique external student number")
    class_id: str
    gender: Optional[Literal["Male", "Female"]] = None
    phone: Optional[str] = None
    passcode: str = "1234"
    status: ActiveStatus = "active"
    faculty_id: Optional[str] = None


class StudentUpdate(Document):
    name: Optional[str] = Field(None, min_length=1)
    parent_phone: Optional[str] = Field(None, min_length=1)
    student_id: Optional[int] = None
    class_id: Optional[str] = None
    gender: Optional[Literal["Male", "Female"]] = None
    phone: Optional[str] = None
    passcode: Optional[str] = None
    status: Optional[ActiveStatus] = None
    faculty_id: Optional[str] = None


class Attendance(Document):
    student_id: str
    class_id: str
    course_id: str
    is_present: bool
    date: Optional[datetime] = None


class AttendanceUpdate(Document):
    student_id: Optional[str] = None
    class_id: Optional[str] = None
    course_id: Optional[str] = None
    is_present: Optional[bool] = None
    date: Optional[datetime] = None


class Examtype(Document):
    name: ExamName
    marks: float = Field(..., gt=0)
    description: Optional[str] = None


class ExamtypeUpdate(Document):
    name: Optional[ExamName] = None
    marks: Optional[float] = Field(None, gt=0)
    description: Optional[str] = None


class Exam(Document):
    student_id: str
    exam_type_id: str
    course_id: str
    marks_obtained: float = Field(..., ge=0)
    date: datetime


class ExamUpdate(Document):
    student_id: Optional[str] = None
    exam_type_id: Optional[str] = None
    course_id: Optional[str] = None
    marks_obtained: Optional[float] = Field(None, ge=0)
    date: Optional[datetime] = None


# Finance
class FeeCreate(Document):
    student_id: str
    finance_type: FinanceType
    amount: float = Field(..., ge=0)
    amount_paid: float = Field(..., ge=0)
    description: Optional[str] = None
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Fee(FeeCreate):
    balance: float
    status: FeeStatus = "unpaid"


class FeeUpdate(Document):
    student_id: Optional[str] = None
    finance_type: Optional[FinanceType] = None
    amount: Optional[float] = Field(None, ge=0)
    amount_paid: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    date: Optional[datetime] = None


# Users and auth
class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(..., min_length=1, alias="FullName")
    email: EmailStr = Field(..., alias="Email", description="Unique email address")
    password: str = Field(..., description="bcrypt hash")
    phone: Optional[str] = None
    title: UserTitle = Field("teacher", alias="Title")
    status: ActiveStatus = Field("active", alias="Status")
    student_id: Optional[str] = Field(None, alias="studentId")


class UserCreate(User):
    password: str = Field(..., min_length=1, description="Plain password, hashed before storage")
    phone: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: Optional[str] = Field(None, min_length=1, alias="FullName")
    email: Optional[EmailStr] = Field(None, alias="Email")
    password: Optional[str] = None
    phone: Optional[str] = None
    title: Optional[UserTitle] = Field(None, alias="Title")
    status: Optional[ActiveStatus] = Field(None, alias="Status")
    student_id: Optional[str] = Field(None, alias="studentId")


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr = Field(..., alias="Email")
    password: str = Field(..., min_length=1)

