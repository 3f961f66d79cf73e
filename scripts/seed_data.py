"""
Demo data: one church, a few students with starting points, a small store
"""

import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sundaystore.database.connection import SessionLocal
from sundaystore.database.session import get_db_context
from sundaystore.models.wallet import TransactionReason, Currency
from sundaystore.repositories.student_repository import StudentRepository
from sundaystore.repositories.wallet_repository import WalletRepository
from sundaystore.schemas.store import StoreItemCreateRequest
from sundaystore.services.inventory_service import InventoryService

CHURCH_ID = 1
STORE_ID = 1

STUDENTS = [
    ("Mina Youssef", 200),
    ("Mark Girgis", 120),
    ("Mary Hanna", 50),
]

ITEMS = [
    # name, points, stock, requires_approval
    ("Pocket Bible", 80, 3, True),
    ("Coloring Book", 30, 10, False),
    ("Cross Necklace", 150, 2, True),
]


def seed_students():
    with get_db_context() as db:
        student_repo = StudentRepository(db)
        wallet_repo = WalletRepository(db)

        for full_name, points in STUDENTS:
            student = student_repo.create_student(
                church_id=CHURCH_ID, full_name=full_name, commit=False
            )
            wallet_repo.apply_transaction(
                student_id=student.id,
                currency=Currency.POINTS,
                delta=points,
                reason=TransactionReason.TEACHER_ADJUSTMENT,
                reference_id=f"seed-{student.id}",
                note="Opening balance",
                commit=False,
            )
            print(f"   {student.id:3d}. {full_name} ({points} points)")
    print(f"Seeded {len(STUDENTS)} students")


def seed_store():
    db = SessionLocal()
    try:
        inventory_service = InventoryService(db)
        for name, points, stock, requires_approval in ITEMS:
            item = inventory_service.create_item(
                StoreItemCreateRequest(
                    store_id=STORE_ID,
                    name=name,
                    price_points=points,
                    stock_quantity=stock,
                    requires_approval=requires_approval,
                )
            )
            print(f"   {item.id:3d}. {name} - {points} points, stock {stock}")
        print(f"Seeded {len(ITEMS)} store items")
    finally:
        db.close()


if __name__ == "__main__":
    seed_students()
    seed_store()
