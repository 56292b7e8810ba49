"""
ClientHub Backend - Client Image Route Handlers
================================================

What:  POST /api/upload-image (bearer) and GET /api/client-image/{imageFileName} (public).
How:   Upload stores the file through AssetService and optionally deletes the
       image it replaces; download streams the stored bytes back verbatim.
Who:   The admin UI's client form (upload) and any <img> that shows a client logo.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile

from clienthub.dependencies import require_admin
from clienthub.exceptions import ValidationError
from clienthub.schemas.client import ImageUploadResponse
from clienthub.schemas.common import ErrorResponse
from clienthub.services.asset_service import asset_service
from clienthub.services.security import TokenIdentity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Images"])


@router.post(
    "/upload-image",
    response_model=ImageUploadResponse,
    responses={
        400: {"description": "No file, or not a jpg/jpeg/png/gif", "model": ErrorResponse},
        500: {"description": "Storage error", "model": ErrorResponse},
    },
    summary="Upload a client image, optionally replacing an older one",
)
async def upload_image(
    image: Optional[UploadFile] = File(default=None, description="Image file (.jpg, .jpeg, .png, .gif)"),
    old_image_form: Optional[str] = Form(default=None, alias="oldImage"),
    old_image_query: Optional[str] = Query(default=None, alias="oldImage"),
    admin: TokenIdentity = Depends(require_admin),
) -> ImageUploadResponse:
    if image is None or not image.filename:
        raise ValidationError(message="No image file provided", field="image")

    try:
        content = await image.read()
        stored_name = await asset_service.store(content, image.filename)
    finally:
        await image.close()

    old_image = old_image_form or old_image_query
    if old_image and old_image != stored_name:
        await asset_service.delete(old_image)

    logger.info("%s uploaded image %s", admin.username, stored_name)
    return ImageUploadResponse(message="Image uploaded successfully", imageFileName=stored_name)


@router.get(
    "/client-image/{imageFileName}",
    responses={
        200: {"description": "Raw image bytes"},
        404: {"description": "Image not found", "model": ErrorResponse},
    },
    summary="Serve a stored client image",
)
async def get_client_image(imageFileName: str) -> Response:
    content = await asset_service.retrieve(imageFileName)
    return Response(
        content=content,
        media_type=asset_service.media_type(imageFileName),
        headers={"Cache-Control": "public, max-age=86400"},
    )
