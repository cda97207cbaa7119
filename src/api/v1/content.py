# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content management API endpoints.

This module provides record endpoints for every portal collection
(batches, subjects, lectures, notes, dpps, students):
- GET /{collection} - List records
- POST /{collection} - Add a record
- GET /{collection}/{record_id} - Get a record
- PATCH /{collection}/{record_id} - Update a record
- DELETE /{collection}/{record_id} - Delete a record
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from src.api.dependencies import get_content_service
from src.domains.content.service import (
    ContentService,
    MutationResult,
    RecordNotFoundError,
    UnknownCollectionError,
)
from src.models.api import RecordListResponse, RecordMutationResponse
from src.utils.logging import bind_context

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _to_response(collection: str, result: MutationResult) -> RecordMutationResponse:
    return RecordMutationResponse(
        collection=collection,
        record=result.record,
        synced=result.synced,
    )


@router.get(
    "/{collection}",
    response_model=RecordListResponse,
    summary="List records",
)
async def list_records(
    collection: str,
    service: ContentService = Depends(get_content_service),
) -> RecordListResponse:
    """List all records of a collection.

    Raises:
        HTTPException: 404 for an unknown collection.
    """
    try:
        items = service.list_records(collection)
    except UnknownCollectionError as e:
        raise _not_found(e)
    return RecordListResponse(collection=collection, items=items, total=len(items))


@router.post(
    "/{collection}",
    response_model=RecordMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add record",
)
async def add_record(
    collection: str,
    record: dict[str, Any] = Body(...),
    service: ContentService = Depends(get_content_service),
) -> RecordMutationResponse:
    """Add a record. An id is generated unless the body carries one.

    Raises:
        HTTPException: 404 for an unknown collection.
    """
    bind_context(collection=collection)
    try:
        result = await service.add_record(collection, record)
    except UnknownCollectionError as e:
        raise _not_found(e)
    return _to_response(collection, result)


@router.get(
    "/{collection}/{record_id}",
    response_model=dict[str, Any],
    summary="Get record",
)
async def get_record(
    collection: str,
    record_id: str,
    service: ContentService = Depends(get_content_service),
) -> dict[str, Any]:
    """Get a single record.

    Raises:
        HTTPException: 404 for an unknown collection or record.
    """
    try:
        return service.get_record(collection, record_id)
    except (UnknownCollectionError, RecordNotFoundError) as e:
        raise _not_found(e)


@router.patch(
    "/{collection}/{record_id}",
    response_model=RecordMutationResponse,
    summary="Update record",
)
async def update_record(
    collection: str,
    record_id: str,
    updates: dict[str, Any] = Body(...),
    service: ContentService = Depends(get_content_service),
) -> RecordMutationResponse:
    """Merge fields into a record.

    Raises:
        HTTPException: 404 for an unknown collection or record.
    """
    bind_context(collection=collection, record_id=record_id)
    try:
        result = await service.update_record(collection, record_id, updates)
    except (UnknownCollectionError, RecordNotFoundError) as e:
        raise _not_found(e)
    return _to_response(collection, result)


@router.delete(
    "/{collection}/{record_id}",
    response_model=RecordMutationResponse,
    summary="Delete record",
)
async def delete_record(
    collection: str,
    record_id: str,
    service: ContentService = Depends(get_content_service),
) -> RecordMutationResponse:
    """Delete a record.

    Raises:
        HTTPException: 404 for an unknown collection or record.
    """
    bind_context(collection=collection, record_id=record_id)
    try:
        result = await service.delete_record(collection, record_id)
    except (UnknownCollectionError, RecordNotFoundError) as e:
        raise _not_found(e)
    return _to_response(collection, result)
