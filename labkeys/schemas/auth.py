from pydantic import BaseModel, Field
from typing import Optional

class UserLogin(BaseModel):
    id: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)

class UserResponse(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    department: Optional[str] = None
    photoUrl: Optional[str] = None
    role: str

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
