"""Mock builders shared by the unit tests."""

from unittest.mock import AsyncMock, MagicMock


def result_with_row(row: object | None) -> MagicMock:
    """A db.execute() result whose fetchone() returns `row`."""
    result = MagicMock()
    result.fetchone.return_value = row
    return result


def row(**fields: object) -> MagicMock:
    r = MagicMock()
    for name, value in fields.items():
        setattr(r, name, value)
    return r


def mock_db(*results: object) -> AsyncMock:
    """AsyncMock session whose execute() yields `results` in order."""
    db = AsyncMock()
    db.execute.side_effect = list(results)
    return db
