from abc import ABC
from typing import TypeVar, Generic, Optional, Dict, Any, Type
from sqlalchemy.orm import Session, Query
from pydantic import BaseModel

T = TypeVar("T")
SchemaType = TypeVar("SchemaType", bound=BaseModel)


class BaseRepository(Generic[T, SchemaType], ABC):
    """Base repository - always hands back pydantic schemas, never ORM rows"""

    def __init__(
        self, model_class: Type[T], schema_class: Type[SchemaType], db: Session
    ):
        self.model_class = model_class
        self.schema_class = schema_class
        self.db = db

    def _to_schema(self, model_instance: Any) -> Optional[SchemaType]:
        """SQLAlchemy model -> pydantic schema"""
        if model_instance is None:
            return None
        return self.schema_class.model_validate(model_instance)

    def _query(self, *entities) -> Query:
        """Query that refreshes rows already in the identity map.

        Balance, stock and status columns are changed with bulk conditional
        UPDATEs, which do not touch loaded objects.
        """
        return self.db.query(*(entities or (self.model_class,))).populate_existing()

    def _finish(self, commit: bool) -> None:
        """Commit, or just flush when the caller owns the transaction"""
        if commit:
            self.db.commit()
        else:
            self.db.flush()

    def get_by_id(self, id: Any) -> Optional[SchemaType]:
        """Lookup by primary key"""
        model_instance = (
            self._query().filter(getattr(self.model_class, "id") == id).first()
        )
        return self._to_schema(model_instance)

    def create(self, commit: bool = True, **kwargs) -> Optional[SchemaType]:
        """Insert a row"""
        instance = self.model_class(**kwargs)
        self.db.add(instance)
        try:
            self.db.flush()
            self.db.refresh(instance)
            if commit:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self._to_schema(instance)

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        query = self.db.query(self.model_class)

        if filters:
            for key, value in filters.items():
                if hasattr(self.model_class, key):
                    query = query.filter(getattr(self.model_class, key) == value)

        return query.count()
