"""
ClientHub Backend - Client Service (Repository + Write Orchestration)
======================================================================

What:  CRUD contract over the `clients` table plus the image handling around writes.
How:   SQLAlchemy select/insert/update statements (always parameterized) on the
       request's AsyncSession; AssetService for uploaded images.
Who:   Called by routes/clients.py.
When:  For every client read or write.

Write Flow (add_client / update_client):
    ┌───────────┐    ┌──────────────┐    ┌────────────┐    ┌──────────────┐
    │ Validate  │───▶│ Store image  │───▶│ Write row  │───▶│ Drop stale   │
    │ payload   │    │ (if sent)    │    │ (commit)   │    │ image (upd.) │
    └───────────┘    └──────────────┘    └────────────┘    └──────────────┘

    Row write fails (DB error, or zero rows on update)
        → the image stored in this request is deleted, the error propagates.
    Validation fails
        → nothing is stored and the database is not touched.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clienthub.exceptions import (
    ClientHubError,
    DatabaseError,
    MissingFieldsError,
    NotFoundError,
    ValidationError,
)
from clienthub.models.client import Client
from clienthub.schemas.client import (
    REQUIRED_CLIENT_FIELDS,
    AppUpdateResponse,
    ClientFields,
    is_blank,
)
from clienthub.services.asset_service import AssetService, asset_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageUpload:
    """An image file taken off a multipart request."""

    filename: str
    content: bytes


def parse_client_id(value: Any) -> int:
    """client_id arrives as a path segment, form string or JSON number."""
    if isinstance(value, bool):
        raise ValidationError(message="client_id must be an integer", field="client_id")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(message="client_id must be an integer", field="client_id")


def parse_client_fields(payload: Mapping[str, Any]) -> ClientFields:
    """
    Apply the write validation policy to a raw payload.

    Raises:
        MissingFieldsError: a mandatory field is absent or blank
        ValidationError:    a date or integer field cannot be parsed
    """
    missing = [name for name in REQUIRED_CLIENT_FIELDS if is_blank(payload.get(name))]
    if missing:
        raise MissingFieldsError(missing)

    try:
        return ClientFields.model_validate(dict(payload))
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationError(message="Invalid field values", context={"errors": errors})


def referenced_image(payload: Mapping[str, Any]) -> Optional[str]:
    """Existing image name carried by an update without an upload (`image`, then `existingImage`)."""
    for key in ("image", "existingImage"):
        value = payload.get(key)
        if is_blank(value):
            continue
        if not isinstance(value, str):
            raise ValidationError(message=f"{key} must be a file name", field=key)
        return value
    return None


class ClientService:
    """
    Client repository and write orchestration.

    Repository primitives (find_all, find_by_name_contains, insert,
    update_by_id, get_app_update_info, set_app_update_info) only talk to the
    database. add_client/update_client wrap them with validation and the
    compensating image cleanup.
    """

    def __init__(self, assets: AssetService):
        self.assets = assets

    # ── Reads ─────────────────────────────────────────────────────────────

    async def find_all(self, db: AsyncSession) -> List[Client]:
        try:
            result = await db.execute(select(Client).order_by(Client.client_id))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Get clients error: %s", str(e))
            raise DatabaseError(message="Failed to fetch clients", context={"reason": str(e)})

    async def find_by_name_contains(self, db: AsyncSession, fragment: str) -> List[Client]:
        """
        Case-insensitive substring match on client_name.

        LIKE wildcards inside the fragment are escaped so they match literally.
        An empty list is a normal result.
        """
        escaped = (
            fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        )
        try:
            result = await db.execute(
                select(Client)
                .where(Client.client_name.ilike(f"%{escaped}%", escape="\\"))
                .order_by(Client.client_id)
            )
            clients = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Client status lookup failed for %r: %s", fragment, str(e))
            raise DatabaseError(message="Database error", context={"reason": str(e)})

        logger.debug("Client name search %r matched %d rows", fragment, len(clients))
        return clients

    async def get_app_update_info(self, db: AsyncSession, client_id: int) -> AppUpdateResponse:
        try:
            result = await db.execute(
                select(Client.app_update, Client.download_link).where(Client.client_id == client_id)
            )
            row = result.first()
        except SQLAlchemyError as e:
            logger.error("Get app update error for client %s: %s", client_id, str(e))
            raise DatabaseError(message="Failed to get app_update", context={"reason": str(e)})

        if row is None:
            raise NotFoundError(resource="client", resource_id=str(client_id))

        return AppUpdateResponse(
            message="App update value retrieved successfully",
            client_id=client_id,
            app_update=bool(row.app_update),
            download_link=row.download_link or "",
        )

    async def _current_image(self, db: AsyncSession, client_id: int) -> Optional[str]:
        """Image reference of an existing client; NotFoundError when the id is unknown."""
        try:
            result = await db.execute(select(Client.image).where(Client.client_id == client_id))
            row = result.first()
        except SQLAlchemyError as e:
            logger.error("Update client lookup failed for %s: %s", client_id, str(e))
            raise DatabaseError(message="Failed to update client", context={"reason": str(e)})

        if row is None:
            raise NotFoundError(resource="client", resource_id=str(client_id))
        return row.image

    # ── Repository Writes ─────────────────────────────────────────────────

    async def insert(self, db: AsyncSession, fields: ClientFields, image: Optional[str]) -> int:
        now = datetime.now(timezone.utc)
        client = Client(**fields.model_dump(), image=image, created_at=now, updated_at=now)
        try:
            db.add(client)
            await db.flush()
            # Committed here so image cleanup only ever follows a durable row
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Add client error: %s", str(e))
            raise DatabaseError(message="Failed to add client", context={"reason": str(e)})
        return client.client_id

    async def update_by_id(
        self,
        db: AsyncSession,
        client_id: int,
        fields: ClientFields,
        image: Optional[str],
    ) -> int:
        """Rewrites every writable column; returns the affected row count."""
        try:
            result = await db.execute(
                update(Client)
                .where(Client.client_id == client_id)
                .values(**fields.model_dump(), image=image, updated_at=datetime.now(timezone.utc))
            )
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Update client error for %s: %s", client_id, str(e))
            raise DatabaseError(message="Failed to update client", context={"reason": str(e)})
        return result.rowcount

    async def set_app_update_info(
        self,
        db: AsyncSession,
        client_id: Optional[int],
        app_update: Optional[bool],
        download_link: Optional[str],
    ) -> AppUpdateResponse:
        missing = [
            name
            for name, value in (
                ("client_id", client_id),
                ("app_update", app_update),
                ("download_link", download_link),
            )
            if is_blank(value)
        ]
        if missing:
            raise MissingFieldsError(
                missing, message="client_id, app_update, and download_link are all required"
            )

        try:
            result = await db.execute(
                update(Client)
                .where(Client.client_id == client_id)
                .values(
                    app_update=app_update,
                    download_link=download_link,
                    updated_at=datetime.now(timezone.utc),
                )
            )
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("App update error for client %s: %s", client_id, str(e))
            raise DatabaseError(message="Failed to update app_update", context={"reason": str(e)})

        if result.rowcount == 0:
            raise NotFoundError(resource="client", resource_id=str(client_id))

        logger.info("Client %s app_update set to %s", client_id, app_update)
        return AppUpdateResponse(
            message="App update and download link updated successfully",
            client_id=client_id,
            app_update=app_update,
            download_link=download_link,
        )

    # ── Orchestrated Writes ───────────────────────────────────────────────

    async def add_client(
        self,
        db: AsyncSession,
        payload: Mapping[str, Any],
        upload: Optional[ImageUpload] = None,
    ) -> Dict[str, Any]:
        """
        Validate, store the optional image, insert the row.

        Returns:
            {"client_id": int, "image": Optional[str]}
        """
        fields = parse_client_fields(payload)
        if upload is not None:
            self.assets.validate_extension(upload.filename)

        stored = await self.assets.store(upload.content, upload.filename) if upload else None
        try:
            client_id = await self.insert(db, fields, stored)
        except ClientHubError:
            await self.assets.delete(stored)
            raise

        logger.info("Client %s added (%s)", client_id, fields.client_name)
        return {"client_id": client_id, "image": stored}

    async def update_client(
        self,
        db: AsyncSession,
        payload: Mapping[str, Any],
        upload: Optional[ImageUpload] = None,
    ) -> Dict[str, Any]:
        """
        Validate, confirm the client exists, store the optional image, update the row.

        Without an upload the image reference comes from `image` or
        `existingImage` in the payload and is cleared when neither is sent.

        Returns:
            {"client_id": int, "image": Optional[str]}
        """
        if is_blank(payload.get("client_id")):
            raise MissingFieldsError(
                ["client_id"]
                + [name for name in REQUIRED_CLIENT_FIELDS if is_blank(payload.get(name))]
            )
        client_id = parse_client_id(payload.get("client_id"))
        fields = parse_client_fields(payload)
        referenced = referenced_image(payload)
        if upload is not None:
            self.assets.validate_extension(upload.filename)

        previous = await self._current_image(db, client_id)

        stored = await self.assets.store(upload.content, upload.filename) if upload else None
        image = stored or referenced

        try:
            affected = await self.update_by_id(db, client_id, fields, image)
        except ClientHubError:
            await self.assets.delete(stored)
            raise

        if affected == 0:
            await self.assets.delete(stored)
            raise NotFoundError(resource="client", resource_id=str(client_id))

        if stored and previous and previous != stored:
            await self.assets.delete(previous)

        logger.info("Client %s updated", client_id)
        return {"client_id": client_id, "image": image}


# ── Singleton Instance ────────────────────────────────────────────────────
client_service = ClientService(assets=asset_service)
