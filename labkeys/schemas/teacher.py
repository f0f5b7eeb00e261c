from pydantic import BaseModel, EmailStr, Field
from typing import Optional

class TeacherBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    department: Optional[str] = Field(None, max_length=255)
    photoUrl: Optional[str] = Field(None, max_length=500)

class TeacherCreate(TeacherBase):
    id: str = Field(..., min_length=1, max_length=50)
    password: Optional[str] = Field(None, min_length=6)  # Omit for kiosk-only teachers

class TeacherUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    department: Optional[str] = Field(None, max_length=255)
    photoUrl: Optional[str] = Field(None, max_length=500)

class TeacherResponse(TeacherBase):
    id: str
    email: Optional[str] = None
