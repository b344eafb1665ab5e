"""Generic CRUD operations shared by every repository.

Every method accepts an optional ``session``. When one is given the work runs
inside the caller's session and nothing is committed, so several repository
calls can share one unit of work. Without a session the method opens its own,
commits, and returns a detached object re-read from a fresh session.
"""
from typing import Optional, List, Dict, Any, Type, TypeVar
from sqlalchemy.orm import Session

from .connection import DatabaseConnection

ModelT = TypeVar("ModelT")


class BaseCRUD:
    """Base class of all repositories.

    Attributes:
        conn: Database connection manager.
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        self.conn = conn

    def _get_session(self) -> Session:
        return self.conn.get_session()

    def create(self, model: Type[ModelT],
               session: Optional[Session] = None, **fields: Any) -> ModelT:
        """Insert a new row.

        Args:
            model: Model class.
            session: External session (optional).
            **fields: Column values.

        Returns:
            The created object.
        """
        def _do(sess):
            obj = model(**fields)
            sess.add(obj)
            sess.flush()
            sess.refresh(obj)
            return obj

        if session:
            return _do(session)

        with self._get_session() as sess:
            obj = _do(sess)
            sess.commit()
            obj_id = obj.id
        return self.get_by_id(model, obj_id)

    def get_by_id(self, model: Type[ModelT], obj_id: int,
                  session: Optional[Session] = None) -> Optional[ModelT]:
        """Fetch a row by primary key, or None."""
        if obj_id is None:
            return None

        if session:
            return session.get(model, obj_id)

        with self._get_session() as sess:
            return sess.get(model, obj_id)

    def get_all(self, model: Type[ModelT],
                filters: Optional[Dict[str, Any]] = None,
                order_by: Optional[Any] = None,
                session: Optional[Session] = None) -> List[ModelT]:
        """Fetch rows matching equality filters.

        Args:
            model: Model class.
            filters: Column name to value mapping (optional).
            order_by: Order-by clause (optional).
            session: External session (optional).

        Returns:
            Matching rows.
        """
        def _query(sess):
            query = sess.query(model)
            if filters:
                query = query.filter_by(**filters)
            if order_by is not None:
                query = query.order_by(order_by)
            return query.all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def update_by_id(self, model: Type[ModelT], obj_id: int,
                     session: Optional[Session] = None,
                     **fields: Any) -> Optional[ModelT]:
        """Update columns of one row.

        Args:
            model: Model class.
            obj_id: Primary key.
            session: External session (optional).
            **fields: Column values to set.

        Returns:
            The updated object, or None when the row does not exist.

        Raises:
            AttributeError: If a field is not a column of the model.
        """
        def _do(sess):
            obj = sess.get(model, obj_id)
            if obj is None:
                return None
            for key, value in fields.items():
                if not hasattr(model, key):
                    raise AttributeError(
                        f"{model.__name__} has no attribute '{key}'"
                    )
                setattr(obj, key, value)
            sess.flush()
            return obj

        if session:
            return _do(session)

        with self._get_session() as sess:
            obj = _do(sess)
            if obj is None:
                return None
            sess.commit()
        return self.get_by_id(model, obj_id)

    def delete_by_id(self, model: Type[ModelT], obj_id: int,
                     session: Optional[Session] = None) -> bool:
        """Delete one row (ORM cascades apply).

        Returns:
            True if a row was deleted, False if it did not exist.
        """
        def _do(sess):
            obj = sess.get(model, obj_id)
            if obj is None:
                return False
            sess.delete(obj)
            sess.flush()
            return True

        if session:
            return _do(session)

        with self._get_session() as sess:
            deleted = _do(sess)
            sess.commit()
            return deleted

    def count(self, model: Type[ModelT],
              filters: Optional[Dict[str, Any]] = None,
              session: Optional[Session] = None) -> int:
        """Count rows matching equality filters."""
        def _query(sess):
            query = sess.query(model)
            if filters:
                query = query.filter_by(**filters)
            return query.count()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)
