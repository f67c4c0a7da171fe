"""
Referential checks and population for documents that point at each other.

References are weak: nothing here cascades, and a dangling reference
populates as ``None``.
"""
from typing import Dict, Iterable, List, Optional, Tuple

from bson import ObjectId

from database import get_db
from errors import InvalidId, NotFound

# wire field -> (collection, label used in error messages)
REFERENCES: Dict[str, Tuple[str, str]] = {
    "academicYearId": ("academicyear", "Academic year"),
    "facultyId": ("faculty", "Faculty"),
    "departmentId": ("department", "Department"),
    "classId": ("class", "Class"),
    "courseId": ("course", "Course"),
    "teacherId": ("user", "Teacher"),
    "studentId": ("student", "Student"),
    "examTypeId": ("examtype", "Exam type"),
}


def parse_object_id(value, label: str = "ID") -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise InvalidId(f"Invalid {label}")
    return ObjectId(value)


def get_or_404(collection: str, id, label: str, projection: Optional[dict] = None) -> dict:
    oid = parse_object_id(id, f"{label.lower()} ID")
    doc = get_db()[collection].find_one({"_id": oid}, projection)
    if doc is None:
        raise NotFound(label, id)
    return doc


def resolve_references(doc: dict, fields: Iterable[str]) -> dict:
    """Check that every listed reference in ``doc`` exists and store it as an ObjectId.

    Missing or ``None`` fields are skipped; malformed ids raise ``InvalidId``
    before any lookup, absent targets raise ``NotFound``.
    """
    fields = [f for f in fields if doc.get(f) is not None]
    for field in fields:
        doc[field] = parse_object_id(doc[field], field)
    for field in fields:
        collection, label = REFERENCES[field]
        if get_db()[collection].find_one({"_id": doc[field]}, {"_id": 1}) is None:
            raise NotFound(label, str(doc[field]))
    return doc


def populate(docs: List[dict], field: str, select: Iterable[str], collection: Optional[str] = None) -> List[dict]:
    """Replace ``doc[field]`` with the referenced document, limited to ``select``."""
    collection = collection or REFERENCES[field][0]
    ids = {d[field] for d in docs if isinstance(d.get(field), ObjectId)}
    if not ids:
        return docs
    projection = {name: 1 for name in select}
    found = {
        target["_id"]: target
        for target in get_db()[collection].find({"_id": {"$in": list(ids)}}, projection)
    }
    for d in docs:
        if isinstance(d.get(field), ObjectId):
            d[field] = found.get(d[field])
    return docs


def populate_many(docs: List[dict], *specs: Tuple[str, Iterable[str]]) -> List[dict]:
    for field, select in specs:
        populate(docs, field, select)
    return docs
