"""Row-store contract and the SQLAlchemy-backed row-store."""

import logging
import uuid
from datetime import date, datetime
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from app.domains.project.mapping import FIELD_TO_COLUMN
from app.exceptions.project import StoreError
from models.project import ProjectRecord

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class RowStore(Protocol):
    """Remote row-store holding one row per project, addressed by id.

    Every method raises ``StoreError`` on transport or store-side failure.
    """

    async def select_all(self) -> list[Row]: ...

    async def insert(self, row: Row) -> Row: ...

    async def update_by_id(self, project_id: str, row: Row) -> Row: ...

    async def delete_by_id(self, project_id: str) -> None: ...

    async def close(self) -> None: ...


def _to_date(value: Any) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _to_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


class SqlAlchemyRowStore:
    """Row-store over the ``projects`` table through async SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker, engine: AsyncEngine | None = None):
        self._session_factory = session_factory
        # Only an engine handed over here is disposed on close
        self._engine = engine

    async def select_all(self) -> list[Row]:
        stmt = select(ProjectRecord).order_by(ProjectRecord.created_at.desc())
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [self._to_row(record) for record in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Failed to fetch projects: %s", e)
            raise StoreError(f"Failed to fetch projects: {e}") from e

    async def insert(self, row: Row) -> Row:
        try:
            record = ProjectRecord(**self._to_columns(row))
        except ValueError as e:
            raise StoreError(f"Failed to create project: {e}") from e

        try:
            async with self._session_factory() as session:
                session.add(record)
                await session.commit()
                await session.refresh(record)
                return self._to_row(record)
        except SQLAlchemyError as e:
            logger.error("Failed to create project: %s", e)
            raise StoreError(f"Failed to create project: {e}") from e

    async def update_by_id(self, project_id: str, row: Row) -> Row:
        try:
            columns = self._to_columns(row)
        except ValueError as e:
            raise StoreError(f"Failed to update project: {e}") from e

        key = self._parse_id(project_id)
        try:
            async with self._session_factory() as session:
                record = await session.get(ProjectRecord, key) if key else None
                if record is None:
                    raise StoreError(f"Project {project_id} does not exist in the store")
                for column, value in columns.items():
                    setattr(record, column, value)
                await session.commit()
                await session.refresh(record)
                return self._to_row(record)
        except SQLAlchemyError as e:
            logger.error("Failed to update project %s: %s", project_id, e)
            raise StoreError(f"Failed to update project: {e}") from e

    async def delete_by_id(self, project_id: str) -> None:
        key = self._parse_id(project_id)
        if key is None:
            return
        try:
            async with self._session_factory() as session:
                record = await session.get(ProjectRecord, key)
                if record is not None:
                    await session.delete(record)
                    await session.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to delete project %s: %s", project_id, e)
            raise StoreError(f"Failed to delete project: {e}") from e

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    # Private helper methods
    @staticmethod
    def _parse_id(project_id: str) -> uuid.UUID | None:
        try:
            return uuid.UUID(str(project_id))
        except ValueError:
            return None

    @staticmethod
    def _to_columns(row: Row) -> Row:
        """Keep known columns and convert ISO strings to Python values."""
        columns = {column: row[column] for column in FIELD_TO_COLUMN.values() if column in row}
        for column in ("start_date", "end_date"):
            if column in columns:
                columns[column] = _to_date(columns[column])
        if "next_meeting" in columns:
            columns["next_meeting"] = _to_datetime(columns["next_meeting"])
        return columns

    @staticmethod
    def _to_row(record: ProjectRecord) -> Row:
        row = {column: getattr(record, column) for column in FIELD_TO_COLUMN.values()}
        row["id"] = str(record.id)
        row["created_at"] = record.created_at
        return row
