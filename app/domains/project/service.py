"""Project service layer: the canonical project collection.

``ProjectService`` is the single owner of the in-memory project list. Writes
are pessimistic: the remote store is called first and the collection changes
only after the store confirms, so no rollback is ever needed. Failures are
returned as tagged ``OperationResult`` values rather than raised.
"""

import asyncio
import contextlib
import logging
from collections import OrderedDict
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from app.core.config import Settings
from app.domains.project.mapping import project_to_row, row_to_project
from app.domains.project.store import RowStore
from app.domains.project.validator import coerce_patch, validate, validate_data
from app.domains.project.view import derive_view
from app.exceptions.project import (
    ProjectNotFoundError,
    ProjectStoreError,
    ProjectValidationError,
    RowMappingError,
    StoreError,
)
from app.schemas.project import (
    LoadState,
    Project,
    ProjectFilters,
    ProjectFormData,
    ProjectUpdate,
    SortConfig,
)
from app.shared.result import OperationResult, Outcome

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Patch = ProjectUpdate | ProjectFormData | Mapping[str, Any]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class _CachedView:
    projects: tuple[Project, ...]
    # First instant at which an upcoming-meetings view can change
    expires_at: datetime | None = None


class ProjectService:
    """Service class owning the canonical project collection."""

    def __init__(
        self,
        store: RowStore,
        clock: Clock = utc_now,
        *,
        serialize_writes: bool = False,
        reconcile_on_missing: bool = False,
        view_cache_size: int = 64,
    ):
        self.store = store
        self.load_state = LoadState.loading
        self.load_error: str | None = None

        self._clock = clock
        self._canonical: list[Project] = []
        self._version = 0
        self._closed = False
        self._serialize_writes = serialize_writes
        self._reconcile_on_missing = reconcile_on_missing
        self._locks: dict[str, asyncio.Lock] = {}
        # Writers holding or waiting on each id lock
        self._lock_users: dict[str, int] = {}
        self._view_cache: OrderedDict[tuple, _CachedView] = OrderedDict()
        self._view_cache_size = view_cache_size

    @property
    def projects(self) -> tuple[Project, ...]:
        """Read-only snapshot of the canonical collection, in fetch order."""
        return tuple(self._canonical)

    @property
    def version(self) -> int:
        return self._version

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, project_id: str) -> Project | None:
        index = self._index_of(project_id)
        return None if index is None else self._canonical[index]

    def close(self) -> None:
        """Stop applying store responses; in-flight calls are discarded."""
        self._closed = True
        logger.info("Project collection closed")

    async def load(self) -> OperationResult[list[Project]]:
        """Fetch every row and replace the collection wholesale.

        On failure the collection is left empty and ``load_state`` is
        ``failed``. There is no automatic retry.
        """
        previous = (self.load_state, self.load_error)
        self.load_state = LoadState.loading
        self.load_error = None

        try:
            rows = await self.store.select_all()
        except StoreError as e:
            if self._closed:
                self.load_state, self.load_error = previous
                return OperationResult(Outcome.discarded)
            logger.error(f"❌ Failed to load projects: {e.message}")
            self._replace([])
            self.load_state = LoadState.failed
            self.load_error = e.message
            return OperationResult.failed(Outcome.store_failed, ProjectStoreError(e.message))

        if self._closed:
            logger.debug("Discarding project fetch received after close")
            self.load_state, self.load_error = previous
            return OperationResult(Outcome.discarded)

        projects = []
        for row in rows:
            project = self._accept_row(row)
            if project is not None:
                projects.append(project)

        self._replace(projects)
        self.load_state = LoadState.ready
        logger.info(f"✅ Loaded {len(projects)} projects")
        return OperationResult.applied(list(projects))

    async def add(self, candidate: ProjectFormData | Mapping[str, Any]) -> OperationResult[Project]:
        """Validate, insert, then append the store-confirmed project.

        Nothing is appended before confirmation since the id is assigned by
        the store.
        """
        form, validation = validate_data(candidate)
        if form is None:
            return OperationResult.failed(
                Outcome.invalid, ProjectValidationError(validation.field_errors)
            )

        try:
            row = await self.store.insert(project_to_row(form))
        except StoreError as e:
            logger.error(f"❌ Failed to create project '{form.name}': {e.message}")
            return OperationResult.failed(Outcome.store_failed, ProjectStoreError(e.message))

        project, error = self._confirmed(row)
        if error is not None:
            return OperationResult.failed(Outcome.store_failed, error)
        if self._closed:
            logger.debug(f"Discarding created project {project.id} received after close")
            return OperationResult(Outcome.discarded, project)

        self._canonical.append(project)
        self._touch()
        logger.info(f"Created project {project.id} ({project.name})")
        return OperationResult.applied(project)

    async def update(self, project_id: str, patch: Patch) -> OperationResult[Project]:
        """Merge ``patch`` over the existing record, validate, persist, replace.

        Serves full-form edits and single-field inline edits alike. Not an
        upsert: a confirmed update for an id missing from the collection is
        reported as ``not_found`` and nothing is added.
        """
        async with self._write_lock(project_id):
            return await self._update(project_id, patch)

    async def remove(self, project_id: str) -> OperationResult[Project]:
        """Delete in the store, then drop the record from the collection."""
        async with self._write_lock(project_id):
            try:
                await self.store.delete_by_id(project_id)
            except StoreError as e:
                logger.error(f"❌ Failed to delete project {project_id}: {e.message}")
                return OperationResult.failed(Outcome.store_failed, ProjectStoreError(e.message))

            if self._closed:
                logger.debug(f"Discarding deletion of {project_id} received after close")
                return OperationResult(Outcome.discarded)

            index = self._index_of(project_id)
            if index is None:
                return await self._missing(project_id)

            removed = self._canonical.pop(index)
            self._touch()
            logger.info(f"Deleted project {project_id}")
            return OperationResult.applied(removed)

    def derive_view(
        self, filters: ProjectFilters | None = None, sort: SortConfig | None = None
    ) -> tuple[Project, ...]:
        """Filtered, sorted projection of the collection.

        Memoized on (collection version, filters, sort); never touches the
        store and never mutates the collection.
        """
        filters = filters or ProjectFilters()
        sort = sort or SortConfig()
        now = self._clock()
        key = (self._version, filters, sort)

        cached = self._view_cache.get(key)
        if cached is not None and (cached.expires_at is None or now < cached.expires_at):
            self._view_cache.move_to_end(key)
            return cached.projects

        projects = tuple(derive_view(self._canonical, filters, sort, now))
        expires_at = None
        if filters.upcoming_meetings:
            expires_at = min((p.next_meeting for p in projects), default=None)

        self._view_cache[key] = _CachedView(projects, expires_at)
        self._view_cache.move_to_end(key)
        while len(self._view_cache) > self._view_cache_size:
            self._view_cache.popitem(last=False)
        return projects

    def unique_assignees(self) -> set[str]:
        return {p.assigned_to for p in self._canonical}

    # Private helper methods
    async def _update(self, project_id: str, patch: Patch) -> OperationResult[Project]:
        changes, is_full, patch_errors = self._patch_fields(patch)
        if patch_errors:
            return OperationResult.failed(Outcome.invalid, ProjectValidationError(patch_errors))

        existing = self.get(project_id)
        if existing is None and not is_full:
            # A partial patch has nothing to merge over
            return await self._missing(project_id)

        base = existing.model_dump(exclude={"id"}) if existing is not None else {}
        form, validation = validate_data({**base, **changes})
        if form is None:
            return OperationResult.failed(
                Outcome.invalid, ProjectValidationError(validation.field_errors)
            )

        try:
            row = await self.store.update_by_id(project_id, project_to_row(form))
        except StoreError as e:
            logger.error(f"❌ Failed to update project {project_id}: {e.message}")
            return OperationResult.failed(Outcome.store_failed, ProjectStoreError(e.message))

        project, error = self._confirmed(row)
        if error is not None:
            return OperationResult.failed(Outcome.store_failed, error)
        if self._closed:
            logger.debug(f"Discarding update of {project_id} received after close")
            return OperationResult(Outcome.discarded, project)

        # Looked up again: the record may have been removed while awaiting
        index = self._index_of(project_id)
        if index is None:
            return await self._missing(project_id, project)

        self._canonical[index] = project
        self._touch()
        logger.info(f"Updated project {project_id}")
        return OperationResult.applied(project)

    @staticmethod
    def _patch_fields(patch: Patch) -> tuple[dict[str, Any], bool, dict[str, str]]:
        """Return (changes, is_full_record, field_errors) for a patch."""
        if isinstance(patch, ProjectFormData):
            return patch.model_dump(exclude={"id"}), True, {}
        changes, errors = coerce_patch(patch)
        return changes, False, errors

    def _accept_row(self, row: dict[str, Any]) -> Project | None:
        """Map a fetched row, skipping rows that would break the invariants."""
        try:
            project = row_to_project(row)
        except RowMappingError as e:
            logger.warning(f"Skipping unreadable project row: {e}")
            return None

        result = validate(project)
        if not result.is_valid:
            logger.warning(f"Skipping invalid project {project.id}: {result.field_errors}")
            return None
        return project

    def _confirmed(self, row: dict[str, Any]) -> tuple[Project | None, ProjectStoreError | None]:
        """Map a store-confirmed row; the store is the authority on its shape."""
        try:
            project = row_to_project(row)
        except RowMappingError as e:
            logger.error(f"❌ Store returned an unreadable project: {e}")
            return None, ProjectStoreError(f"Store returned an unreadable project: {e}")

        result = validate(project)
        if not result.is_valid:
            logger.error(f"❌ Store returned invalid project {project.id}: {result.field_errors}")
            return None, ProjectStoreError(f"Store returned an invalid project {project.id}")
        return project, None

    async def _missing(
        self, project_id: str, value: Project | None = None
    ) -> OperationResult[Project]:
        logger.info(f"Project {project_id} is not in the collection; nothing applied")
        if self._reconcile_on_missing and not self._closed:
            await self.load()
        return OperationResult(Outcome.not_found, value, ProjectNotFoundError(project_id))

    @contextlib.asynccontextmanager
    async def _write_lock(self, project_id: str):
        if not self._serialize_writes:
            yield
            return

        lock = self._locks.setdefault(project_id, asyncio.Lock())
        self._lock_users[project_id] = self._lock_users.get(project_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[project_id] -= 1
            if not self._lock_users[project_id]:
                del self._lock_users[project_id]
                del self._locks[project_id]

    def _index_of(self, project_id: str) -> int | None:
        for index, project in enumerate(self._canonical):
            if project.id == project_id:
                return index
        return None

    def _replace(self, projects: list[Project]) -> None:
        self._canonical = projects
        self._touch()

    def _touch(self) -> None:
        self._version += 1
        self._view_cache.clear()


def create_project_service(store: RowStore, config: Settings, clock: Clock = utc_now) -> ProjectService:
    """Build a ProjectService with the collection behaviour from settings."""
    return ProjectService(
        store,
        clock,
        serialize_writes=config.serialize_writes,
        reconcile_on_missing=config.reconcile_on_missing,
        view_cache_size=config.view_cache_size,
    )
