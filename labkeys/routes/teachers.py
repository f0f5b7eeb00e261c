from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from labkeys.database import get_db, unit_of_work
from labkeys.models.user import User
from labkeys.schemas.teacher import TeacherCreate, TeacherUpdate, TeacherResponse
from labkeys.services import checkout, directory
from labkeys.services.auth import get_current_user, get_password_hash, require_admin

router = APIRouter(prefix="/api/teachers", tags=["Teachers"])

def _to_response(teacher: User) -> TeacherResponse:
    return TeacherResponse(**teacher.to_dict())

@router.get("", response_model=List[TeacherResponse])
def get_teachers(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all teachers."""
    return [_to_response(teacher) for teacher in directory.list_teachers(db)]

@router.post("", response_model=TeacherResponse, status_code=status.HTTP_201_CREATED)
def create_teacher(
    teacher_data: TeacherCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Add a teacher. Teachers without a password can only use the kiosk."""
    with unit_of_work(db):
        teacher = directory.create_teacher(
            db,
            teacher_id=teacher_data.id,
            name=teacher_data.name,
            email=teacher_data.email,
            department=teacher_data.department,
            photo_url=teacher_data.photoUrl,
            password_hash=get_password_hash(teacher_data.password) if teacher_data.password else None,
        )
    return _to_response(teacher)

@router.put("/{teacher_id}", response_model=TeacherResponse)
def update_teacher(
    teacher_id: str,
    teacher_data: TeacherUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Edit a teacher's details. Fields sent as null are cleared; name is required."""
    changes = teacher_data.model_dump(exclude_unset=True)
    if "photoUrl" in changes:
        changes["photo_url"] = changes.pop("photoUrl")
    if changes.get("name", "") is None:
        del changes["name"]
    with unit_of_work(db):
        teacher = directory.update_teacher(db, teacher_id, **changes)
    return _to_response(teacher)

@router.delete("/{teacher_id}")
def delete_teacher(
    teacher_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a teacher with no keys out."""
    checkout.delete_teacher(db, teacher_id)
    return {"message": "Teacher deleted successfully"}
