import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sundaystore.database.connection import engine
from sundaystore.config import settings
from sundaystore.models import Base


def init_db():
    """Create all tables"""
    try:
        Base.metadata.create_all(bind=engine)
        print(f"Database initialized: {settings.DATABASE_URL}")
    except Exception as e:
        print(f"Database initialization failed: {str(e)}")
        raise


if __name__ == "__main__":
    init_db()
