"""
ClientHub Backend - Client Request/Response Schemas
====================================================

What:  Pydantic models for the client endpoints.
How:   `ClientFields` turns a raw payload (JSON object or multipart form) into
       typed column values; the response models serialize ORM rows.
Who:   ClientService (input normalization) and the client/image routes.

Input normalization rules (applied by ClientFields):
    - optional text fields: None → ""
    - optional numbers/dates: None or blank → None
    - numbers sent as JSON numbers are accepted for text columns (duration, ...)
    - roles: list → "a,b,c"; string passed through unchanged
"""

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Columns a create/update request must carry (non-blank)
REQUIRED_CLIENT_FIELDS = (
    "client_name",
    "license_no",
    "issue_date",
    "duration",
    "default_due_on",
    "max_due_on",
)

_OPTIONAL_TEXT_FIELDS = (
    "status",
    "plan_name",
    "customers_login",
    "sales_mgr_login",
    "superadmin_login",
    "client_address",
    "product_prefix",
    "customer_prefix",
    "sm_prefix",
    "ord_prefix",
    "inv_prefix",
)

_OPTIONAL_NULLABLE_FIELDS = ("expiry_date", "adv_timer", "hsn_length", "ord_prefix_num")


def is_blank(value: Any) -> bool:
    """A mandatory value counts as missing when absent, null, or whitespace-only."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def serialize_roles(value: Any) -> str:
    """Roles arrive either as a list of names or as an already-joined string."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(role) for role in value)
    if isinstance(value, str):
        return value
    return ""


class ClientFields(BaseModel):
    """Typed column values for an insert or a full update of a client row."""

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    client_name: str
    license_no: str
    issue_date: date
    expiry_date: Optional[date] = None
    status: str = ""
    duration: str
    plan_name: str = ""
    customers_login: str = ""
    sales_mgr_login: str = ""
    superadmin_login: str = ""
    client_address: str = ""
    product_prefix: str = ""
    customer_prefix: str = ""
    sm_prefix: str = ""
    adv_timer: Optional[int] = None
    hsn_length: Optional[int] = None
    roles: str = ""
    ord_prefix: str = ""
    inv_prefix: str = ""
    ord_prefix_num: Optional[int] = None
    default_due_on: int
    max_due_on: int

    @field_validator(*_OPTIONAL_TEXT_FIELDS, mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator(*_OPTIONAL_NULLABLE_FIELDS, mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("roles", mode="before")
    @classmethod
    def _join_roles(cls, v: Any) -> str:
        return serialize_roles(v)


class ClientResponse(BaseModel):
    """Full client row as returned by GET /api/clients and /api/client_status."""

    model_config = ConfigDict(from_attributes=True)

    client_id: int
    client_name: str
    license_no: str
    issue_date: date
    expiry_date: Optional[date] = None
    status: str
    duration: str
    plan_name: str
    customers_login: str
    sales_mgr_login: str
    superadmin_login: str
    client_address: str
    product_prefix: str
    customer_prefix: str
    sm_prefix: str
    adv_timer: Optional[int] = None
    hsn_length: Optional[int] = None
    roles: str
    ord_prefix: str
    inv_prefix: str
    ord_prefix_num: Optional[int] = None
    default_due_on: int
    max_due_on: int
    image: Optional[str] = None
    app_update: bool
    download_link: str
    created_at: datetime
    updated_at: datetime


class ClientStatusResponse(BaseModel):
    success: bool = True
    data: List[ClientResponse]


class ClientWriteResponse(BaseModel):
    """Returned by add_client (201) and update_client (200)."""
    message: str
    client_id: int
    imageFileName: Optional[str] = None


class AppUpdateRequest(BaseModel):
    client_id: Optional[int] = None
    app_update: Optional[bool] = None
    download_link: Optional[str] = None


class AppUpdateResponse(BaseModel):
    message: str
    client_id: int
    app_update: bool
    download_link: str


class ImageUploadResponse(BaseModel):
    message: str = Field(default="Image uploaded successfully")
    imageFileName: str
