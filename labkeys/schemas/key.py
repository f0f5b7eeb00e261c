from pydantic import BaseModel, Field

class KeyCreate(BaseModel):
    keyId: str = Field(..., min_length=1, max_length=50)
    lab: str = Field(..., min_length=1, max_length=255)

class KeyResponse(BaseModel):
    keyId: str
    lab: str
    status: str
