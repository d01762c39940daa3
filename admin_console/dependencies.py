"""Shared FastAPI dependencies."""

import httpx
from fastapi import Depends, Request

from admin_console.auth.dependencies import CurrentUser, get_current_user
from admin_console.data_service import DataServiceClient


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """The process-wide EMS backend client created in the app lifespan."""
    return request.app.state.http_client


async def get_data_service(
    user: CurrentUser = Depends(get_current_user),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> DataServiceClient:
    """FastAPI dependency: a data-service client carrying the caller's token."""
    return DataServiceClient(http, token=user.token)
