from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from sundaystore.config import Settings
from sundaystore.database.connection import build_engine, build_session_factory
from sundaystore.database.session import get_db
from sundaystore.main import app
from sundaystore.models import Base
from sundaystore.models.wallet import Currency, TransactionReason
from sundaystore.repositories.student_repository import StudentRepository
from sundaystore.schemas.store import StoreItemCreateRequest
from sundaystore.services.inventory_service import InventoryService
from sundaystore.services.wallet_service import WalletService


@pytest.fixture
def engine(tmp_path):
    # file-backed so that separate sessions (threads, requests) see each other's commits
    engine = build_engine(f"sqlite:///{tmp_path / 'sundaystore_test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://")


@pytest.fixture
def make_student(db):
    """Student with an opening points/cash balance.

    Commits before returning so no write lock is held by the test session.
    """

    def _make(full_name="Test Student", church_id=1, points=0, cash=Decimal("0")):
        student = StudentRepository(db).create_student(
            church_id=church_id, full_name=full_name
        )
        wallet_service = WalletService(db)
        if points:
            wallet_service.credit(
                student.id,
                Currency.POINTS,
                points,
                TransactionReason.TEACHER_ADJUSTMENT,
                reference_id=f"opening-{student.id}",
                note="Opening balance",
            )
        if cash:
            wallet_service.credit(
                student.id,
                Currency.CASH,
                cash,
                TransactionReason.TEACHER_ADJUSTMENT,
                reference_id=f"opening-cash-{student.id}",
                note="Opening balance",
            )
        db.commit()
        return student

    return _make


@pytest.fixture
def make_item(db):
    def _make(
        name="Pocket Bible",
        price_points=80,
        price_cash=Decimal("0"),
        stock_quantity=3,
        requires_approval=True,
        is_active=True,
        store_id=1,
    ):
        item = InventoryService(db).create_item(
            StoreItemCreateRequest(
                store_id=store_id,
                name=name,
                price_points=price_points,
                price_cash=price_cash,
                stock_quantity=stock_quantity,
                requires_approval=requires_approval,
                is_active=is_active,
            ),
            actor_id=900,
        )
        db.commit()
        return item

    return _make


@pytest.fixture
def client(session_factory):
    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def teacher_headers():
    return {"X-Actor-Id": "900", "X-Actor-Role": "teacher"}


@pytest.fixture
def admin_headers():
    return {"X-Actor-Id": "901", "X-Actor-Role": "church_admin"}


@pytest.fixture
def student_headers():
    """Headers for a student actor; pass the student's id"""

    def _headers(student_id):
        return {"X-Actor-Id": str(student_id), "X-Actor-Role": "student"}

    return _headers
