"""
Lenient pagination query parameters.

limit and offset arrive as raw strings. A value that is not an
integer is treated as absent, and LedgerService.page_bounds then
applies the defaults and the cap.
"""

from dataclasses import dataclass

from fastapi import Query


@dataclass(frozen=True)
class PageParams:
    limit: int | None
    offset: int | None


def _as_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def page_params(
    limit: str | None = Query(default=None),
    offset: str | None = Query(default=None),
) -> PageParams:
    """FastAPI dependency: the requested page, unparsable values dropped."""
    return PageParams(limit=_as_int(limit), offset=_as_int(offset))
