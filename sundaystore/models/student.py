from sqlalchemy import BigInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from sundaystore.models.base import BaseModel, BigIntegerPK


class Student(BaseModel):
    """Minimal student record: the owner of a wallet and the link to a church.

    Enrollment and profile data live in the surrounding application.
    """

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(BigIntegerPK, primary_key=True, autoincrement=True)
    church_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
