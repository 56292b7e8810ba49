"""
ClientHub Backend - Client Route Handlers
==========================================

What:  Client listing, name search, add/update, and the app-update flag.
How:   Handlers collect input (JSON or form), delegate to ClientService and
       shape the response; errors are formatted by the global handlers.
Who:   Called by the admin UI (protected routes) and by client apps polling
       their own status (GET /api/client_status/{client_name}, public).

Route Inventory:
    GET  /api/clients                       bearer
    GET  /api/client_status/{client_name}   public
    POST /api/add_client                    bearer, JSON or multipart (+ image)
    PUT  /api/update_client                 bearer, JSON or multipart (+ image)
    GET  /api/app_update/{client_id}        bearer
    POST /api/app_update                    bearer
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from clienthub.database import get_db_session
from clienthub.dependencies import require_admin
from clienthub.exceptions import ValidationError
from clienthub.schemas.client import (
    AppUpdateRequest,
    AppUpdateResponse,
    ClientResponse,
    ClientStatusResponse,
    ClientWriteResponse,
)
from clienthub.schemas.common import ErrorResponse
from clienthub.services.client_service import ImageUpload, client_service, parse_client_id
from clienthub.services.security import TokenIdentity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Clients"])

_FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")
_JSON_OBJECT = TypeAdapter(Dict[str, Any])


async def read_client_payload(request: Request) -> Tuple[Dict[str, Any], Optional[ImageUpload]]:
    """
    Collect client fields from a JSON body or a (multipart) form.

    Repeated form keys (and `roles[]` style keys) become lists; a file sent
    under `image` is returned separately as an ImageUpload.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        payload: Dict[str, Any] = {}
        upload: Optional[ImageUpload] = None
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == "image" and value.filename:
                    upload = ImageUpload(filename=value.filename, content=await value.read())
                continue
            name = key[:-2] if key.endswith("[]") else key
            if name in payload:
                existing = payload[name]
                payload[name] = existing + [value] if isinstance(existing, list) else [existing, value]
            elif key.endswith("[]"):
                payload[name] = [value]
            else:
                payload[name] = value
        return payload, upload

    body = await request.body()
    if not body.strip():
        return {}, None
    try:
        return _JSON_OBJECT.validate_json(body), None
    except PydanticValidationError:
        raise ValidationError(message="Request body must be a JSON object")


@router.get(
    "/clients",
    response_model=List[ClientResponse],
    responses={500: {"description": "Database error", "model": ErrorResponse}},
    summary="List every client",
)
async def list_clients(
    admin: TokenIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> List[ClientResponse]:
    clients = await client_service.find_all(db)
    logger.debug("Listed %d clients for %s", len(clients), admin.username)
    return [ClientResponse.model_validate(c) for c in clients]


@router.get(
    "/client_status/{client_name}",
    response_model=ClientStatusResponse,
    responses={404: {"description": "No client name contains the fragment"}},
    summary="Find clients whose name contains the given fragment",
)
async def client_status(
    client_name: str,
    db: AsyncSession = Depends(get_db_session),
):
    clients = await client_service.find_by_name_contains(db, client_name)
    if not clients:
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": "No clients found with the given name"},
        )
    return ClientStatusResponse(
        success=True,
        data=[ClientResponse.model_validate(c) for c in clients],
    )


@router.post(
    "/add_client",
    status_code=201,
    response_model=ClientWriteResponse,
    responses={
        400: {"description": "Missing or invalid fields, unsupported image type", "model": ErrorResponse},
        500: {"description": "Database or storage error", "model": ErrorResponse},
    },
    summary="Create a client (optionally with an image)",
)
async def add_client(
    request: Request,
    admin: TokenIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ClientWriteResponse:
    payload, upload = await read_client_payload(request)
    result = await client_service.add_client(db, payload, upload)
    return ClientWriteResponse(
        message="Client added successfully",
        client_id=result["client_id"],
        imageFileName=result["image"],
    )


@router.put(
    "/update_client",
    response_model=ClientWriteResponse,
    responses={
        400: {"description": "Missing or invalid fields, unsupported image type", "model": ErrorResponse},
        404: {"description": "No client with that client_id", "model": ErrorResponse},
        500: {"description": "Database or storage error", "model": ErrorResponse},
    },
    summary="Rewrite a client (optionally replacing its image)",
)
async def update_client(
    request: Request,
    admin: TokenIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ClientWriteResponse:
    payload, upload = await read_client_payload(request)
    result = await client_service.update_client(db, payload, upload)
    return ClientWriteResponse(
        message="Client updated successfully",
        client_id=result["client_id"],
        imageFileName=result["image"],
    )


@router.get(
    "/app_update/{client_id}",
    response_model=AppUpdateResponse,
    responses={
        400: {"description": "client_id is not an integer", "model": ErrorResponse},
        404: {"description": "Client not found", "model": ErrorResponse},
    },
    summary="Read a client's app-update flag and download link",
)
async def get_app_update(
    client_id: str,
    admin: TokenIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AppUpdateResponse:
    return await client_service.get_app_update_info(db, parse_client_id(client_id))


@router.post(
    "/app_update",
    response_model=AppUpdateResponse,
    responses={
        400: {"description": "Missing fields", "model": ErrorResponse},
        404: {"description": "Client not found", "model": ErrorResponse},
    },
    summary="Set a client's app-update flag and download link",
)
async def set_app_update(
    payload: AppUpdateRequest,
    admin: TokenIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AppUpdateResponse:
    return await client_service.set_app_update_info(
        db,
        client_id=payload.client_id,
        app_update=payload.app_update,
        download_link=payload.download_link,
    )
