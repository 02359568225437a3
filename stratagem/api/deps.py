"""
Request dependencies - Settings, services and pagination.

The application factory stores the settings and the resolved
``ServiceContext`` on ``app.state``; handlers receive them through these
dependencies rather than importing globals.
"""

from typing import Annotated, Sequence, TypeVar

from fastapi import Depends, Query, Request

from ..config import Settings
from ..services.registry import ServiceContext

T = TypeVar("T")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_services(request: Request) -> ServiceContext:
    return request.app.state.services


Services = Annotated[ServiceContext, Depends(get_services)]
Page = Annotated[int, Query(ge=1, description="1-based page number")]
PageSize = Annotated[int, Query(alias="pageSize", ge=1, le=100, description="Items per page")]


def paginate(items: Sequence[T], page: int, page_size: int) -> list[T]:
    start = (page - 1) * page_size
    return list(items[start:start + page_size])
