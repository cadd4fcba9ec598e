"""Shared repository plumbing for the auth store (SQLAlchemy 2.x).

Repositories here are persistence-only: they build statements, stage rows
and flush. Opening, committing and rolling back transactions belongs to the
Unit of Work owned by the calling service.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from cmdb.core.extensions import db

E = TypeVar("E")

Columns = Mapping[str, InstrumentedAttribute[Any]]


def parse_sort_tokens(raw: Iterable[str]) -> list[tuple[str, bool]]:
    """Turn ``["-created_at", "username"]`` into ``[("created_at", True), ("username", False)]``.

    Blank tokens are dropped.
    """
    parsed: list[tuple[str, bool]] = []
    for token in raw:
        descending = token.startswith("-")
        name = token.lstrip("-").strip()
        if name:
            parsed.append((name, descending))
    return parsed


def apply_sorting(
    stmt: Select[Any],
    sortable: Columns,
    tokens: Iterable[str],
    *,
    pk_attr: InstrumentedAttribute[Any] | None,
) -> Select[Any]:
    """Order ``stmt`` by whitelisted public keys, primary key last.

    Keys missing from ``sortable`` are skipped, so a client can never order by
    a column that is not meant to be exposed (``password_hash``, ``token_hash``).
    """
    for name, descending in parse_sort_tokens(tokens):
        column = sortable.get(name)
        if column is not None:
            stmt = stmt.order_by(column.desc() if descending else column.asc())
    if pk_attr is not None:
        stmt = stmt.order_by(pk_attr.asc())
    return stmt


class BaseRepository(Generic[E]):
    """Persistence helpers common to one mapped class.

    Subclasses set ``model`` and may expose ``_sortable_fields`` and
    ``_filterable_fields`` whitelists for :meth:`list`.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Session shared by the Unit of Work. Falls back to the
            Flask-scoped ``db.session`` when omitted.
        """
        self._session = session

    @property
    def session(self) -> Session:
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _sortable_fields(self) -> Columns:
        return {}

    def _filterable_fields(self) -> Columns:
        return {}

    def _apply_equality_filters(self, stmt: Select[Any], filters: Mapping[str, Any] | None):
        allowed = self._filterable_fields()
        for key, value in (filters or {}).items():
            column = allowed.get(key)
            if column is not None:
                stmt = stmt.where(column == value)
        return stmt

    # ------------------------------------------------------------------ writes

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so defaults and constraints apply now.

        :raises sqlalchemy.exc.IntegrityError: On a constraint violation.
        """
        self.session.add(instance)
        self.flush()
        return instance

    def flush(self) -> None:
        self.session.flush()

    # ------------------------------------------------------------------- reads

    def get(self, entity_id: Any) -> E | None:
        """Return the row with primary key ``entity_id``, or ``None``."""
        return self.session.get(self.model, entity_id)

    def list(
        self,
        *,
        filters: Mapping[str, Any] | None = None,
        sort: Iterable[str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[E]:
        """List rows filtered by whitelisted equality filters, sorted and sliced."""
        stmt: Select[Any] = select(self.model)
        stmt = self._apply_equality_filters(stmt, filters)
        stmt = apply_sorting(stmt, self._sortable_fields(), sort or [], pk_attr=self._pk_attr())
        if limit is not None:
            stmt = stmt.limit(int(limit))
        if offset is not None:
            stmt = stmt.offset(int(offset))
        return list(self.session.execute(stmt).scalars().all())
