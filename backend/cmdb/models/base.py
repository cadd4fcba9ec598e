"""Reusable SQLAlchemy mixins shared by domain models (typed 2.0)."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    SQLite hands back naive datetimes even for ``DateTime(timezone=True)``
    columns; every value we persist is UTC, so naive values are labelled as
    such rather than converted.

    :param value: Datetime loaded from the database or built in code.
    :type value: datetime
    :returns: Timezone-aware UTC datetime.
    :rtype: datetime
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utcnow() -> datetime:
    """Return the current aware UTC time."""
    return datetime.now(UTC)


class CreatedAtMixin:
    """Provide an immutable ``created_at`` column.

    Attributes
    ----------
    created_at:
        Timezone-aware timestamp; filled by Python so that tests with a frozen
        clock see consistent values, with a server default as a fallback.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )


class UUIDPKMixin:
    """Expose a UUID surrogate primary key column named ``id``.

    Attributes
    ----------
    id:
        Random UUID4 generated client-side at insert time.
    """

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


class ReprMixin:
    """Provide a concise ``__repr__`` including the class name and id."""

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        key = getattr(self, "id", None)
        return f"<{cls} id={key}>"
