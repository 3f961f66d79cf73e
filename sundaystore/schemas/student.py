from pydantic import BaseModel


class StudentResponse(BaseModel):
    id: int
    church_id: int
    full_name: str

    class Config:
        from_attributes = True
