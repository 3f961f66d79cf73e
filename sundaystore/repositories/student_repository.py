from typing import Optional

from sqlalchemy.orm import Session

from sundaystore.models.student import Student as StudentModel
from sundaystore.repositories.base import BaseRepository
from sundaystore.schemas.student import StudentResponse


class StudentRepository(BaseRepository[StudentModel, StudentResponse]):
    def __init__(self, db: Session):
        super().__init__(StudentModel, StudentResponse, db)

    def get_student(self, student_id: int) -> Optional[StudentResponse]:
        return self.get_by_id(student_id)

    def create_student(
        self, church_id: int, full_name: str, commit: bool = True
    ) -> StudentResponse:
        return self.create(commit=commit, church_id=church_id, full_name=full_name)
