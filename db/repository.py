import logging
import uuid
from abc import ABC, abstractmethod
from typing import Dict, List

from sqlalchemy import Engine, create_engine, event, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker
from sqlalchemy.pool import StaticPool

from models import Flow, ObjectType

from .converters import action_to_row, condition_to_row, db_to_pydantic_flow, flow_to_row, group_to_row
from .models import Base, ConditionGroupModel, LogicFlowModel

logger = logging.getLogger(__name__)


class FlowNotFoundError(LookupError):
    """Raised when a flow id does not exist in the store."""


class PersistenceError(RuntimeError):
    """Raised when a save could not be completed. Nothing from the failed save is kept; retrying is safe."""


class FlowRepository(ABC):
    """
    Abstract persistence boundary. Implementations are responsible for
    durability, conflicts, and connectivity. This layer treats the DB as a
    black box.

    Concurrent edits of the same flow are not coordinated: the last save wins.
    """

    @abstractmethod
    def save(self, flow: Flow) -> str:
        """Persist the whole flow atomically and return its identifier."""
        raise NotImplementedError

    @abstractmethod
    def get(self, flow_id: str) -> Flow | None:
        """Fetch a flow by id, or None if missing."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, flow_id: str) -> bool:
        """Delete a flow with all of its groups, conditions and actions."""
        raise NotImplementedError

    @abstractmethod
    def list_flows(self, object_type: ObjectType | str | None = None, active_only: bool = False) -> List[Flow]:
        raise NotImplementedError

    def load(self, flow_id: str) -> Flow:
        flow = self.get(flow_id)
        if flow is None:
            raise FlowNotFoundError(f"Flow {flow_id} does not exist")
        return flow


def _matches(flow: Flow, object_type: ObjectType | str | None, active_only: bool) -> bool:
    if object_type is not None and flow.object_type != ObjectType(object_type):
        return False
    return flow.is_active or not active_only


class InMemoryFlowRepository(FlowRepository):
    """
    Minimal in-memory implementation for local testing. Not intended for prod.
    """

    def __init__(self) -> None:
        self._storage: Dict[str, Flow] = {}

    def save(self, flow: Flow) -> str:
        flow_id = flow.id or str(uuid.uuid4())
        stored = flow.model_copy(deep=True)
        stored.id = flow_id
        self._storage[flow_id] = stored
        return flow_id

    def get(self, flow_id: str) -> Flow | None:
        stored = self._storage.get(flow_id)
        return stored.model_copy(deep=True) if stored else None

    def delete(self, flow_id: str) -> bool:
        return self._storage.pop(flow_id, None) is not None

    def list_flows(self, object_type: ObjectType | str | None = None, active_only: bool = False) -> List[Flow]:
        return [
            flow.model_copy(deep=True)
            for flow in self._storage.values()
            if _matches(flow, object_type, active_only)
        ]


class SqlAlchemyFlowRepository(FlowRepository):
    """
    Stores flows in the logic_flows / condition group / condition / action tables.

    A save is one transaction: the flow row, then each group in row order (flushed to obtain
    its id), then that group's conditions and actions. Any failure rolls the whole save back.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def save(self, flow: Flow) -> str:
        if flow.object_type is None:
            raise ValueError("Cannot save a flow without an object type")
        try:
            with self._session_factory.begin() as session:
                flow_id = self._write(session, flow)
        except SQLAlchemyError as exc:
            logger.error("Saving flow %r failed and was rolled back: %s", flow.name, exc)
            raise PersistenceError(f"Failed to save flow: {exc}") from exc
        logger.info("Saved flow %r as %s", flow.name, flow_id)
        return flow_id

    def _write(self, session: Session, flow: Flow) -> str:
        if flow.id is not None:
            existing = session.get(LogicFlowModel, flow.id)
            if existing is not None:
                # Last save wins: replace the stored structure wholesale.
                session.delete(existing)
                session.flush()

        flow_row = flow_to_row(flow)
        if flow.id is not None:
            flow_row.id = flow.id
        session.add(flow_row)
        session.flush()

        for group in flow.ordered_groups():
            group_row = group_to_row(group, flow_row.id)
            session.add(group_row)
            session.flush()
            for condition in group.ordered_conditions():
                session.add(condition_to_row(condition, group_row.id))
            for action in group.ordered_actions():
                session.add(action_to_row(action, group_row.id))
        session.flush()
        return flow_row.id

    def _query(self):
        return select(LogicFlowModel).options(
            selectinload(LogicFlowModel.groups).selectinload(ConditionGroupModel.conditions),
            selectinload(LogicFlowModel.groups).selectinload(ConditionGroupModel.actions),
        )

    def get(self, flow_id: str) -> Flow | None:
        with self._session_factory() as session:
            row = session.scalars(self._query().where(LogicFlowModel.id == flow_id)).first()
            return db_to_pydantic_flow(row) if row is not None else None

    def delete(self, flow_id: str) -> bool:
        with self._session_factory.begin() as session:
            row = session.get(LogicFlowModel, flow_id)
            if row is None:
                return False
            session.delete(row)
        logger.info("Deleted flow %s", flow_id)
        return True

    def list_flows(self, object_type: ObjectType | str | None = None, active_only: bool = False) -> List[Flow]:
        statement = self._query().order_by(LogicFlowModel.created_at, LogicFlowModel.name)
        if object_type is not None:
            statement = statement.where(LogicFlowModel.object_type == ObjectType(object_type).value)
        if active_only:
            statement = statement.where(LogicFlowModel.is_active.is_(True))
        with self._session_factory() as session:
            return [db_to_pydantic_flow(row) for row in session.scalars(statement).all()]


def _engine_kwargs(url: str) -> dict:
    kwargs: dict = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url:
            kwargs["poolclass"] = StaticPool
    return kwargs


def create_engine_for_url(url: str) -> Engine:
    engine = create_engine(url, **_engine_kwargs(url))
    if url.startswith("sqlite"):
        # SQLite only honours ON DELETE CASCADE with foreign keys switched on.
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(engine)
