from datetime import UTC, datetime
from typing import Annotated

from pydantic import NaiveDatetime
from sqlalchemy import text

# Naive UTC timestamp column (TIMESTAMP WITHOUT TIME ZONE). Plain datetime maps to
# a tz-aware column in current sqlmodel, which rejects the values utc_now() returns.
UtcDatetime = Annotated[datetime, NaiveDatetime]


def utc_now() -> datetime:
    """Return current UTC time as naive datetime (for TIMESTAMP WITHOUT TIME ZONE).

    All times are stored in UTC by convention.
    """
    return datetime.now(UTC).replace(tzinfo=None)


def active_rows_only() -> dict[str, object]:
    """Index kwargs restricting a unique index to rows that are not soft-deleted.

    Both dialects support partial indexes; the test suite runs on SQLite.
    """
    return {
        "postgresql_where": text("deleted_at IS NULL"),
        "sqlite_where": text("deleted_at IS NULL"),
    }
