"""
ClientHub Backend - Client SQLAlchemy Model
============================================

What:  ORM model representing the `clients` table.
How:   Inherits from the shared DeclarativeBase; Alembic migration 001 mirrors it.
Who:   Used by ClientService for all reads and writes.

Column groups:
    - identity:       client_id (generated, never changes), client_name
    - licensing:      license_no, issue_date, expiry_date, status, duration, plan_name
    - logins:         customers_login, sales_mgr_login, superadmin_login
    - prefixes:       product_prefix, customer_prefix, sm_prefix, ord_prefix,
                      inv_prefix, ord_prefix_num
    - tuning:         adv_timer, hsn_length
    - due dates:      default_due_on, max_due_on
    - roles:          comma-delimited role names, stored as sent
    - image:          stored asset name (see AssetService), nullable
    - app update:     app_update flag + download_link for the client's app
"""

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from clienthub.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Client(Base):
    """
    A tenant of the administration tool.

    Lifecycle:
        1. Created by POST /api/add_client
        2. Rewritten in full by PUT /api/update_client
        3. app_update/download_link changed by POST /api/app_update
        4. Never deleted through the API
    """

    __tablename__ = "clients"

    client_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    license_no: Mapped[str] = mapped_column(String(100), nullable=False)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Free text; not interpreted by the backend
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    duration: Mapped[str] = mapped_column(String(50), nullable=False)
    plan_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    customers_login: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    sales_mgr_login: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    superadmin_login: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    client_address: Mapped[str] = mapped_column(Text, nullable=False, default="")

    product_prefix: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    customer_prefix: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    sm_prefix: Mapped[str] = mapped_column(String(20), nullable=False, default="")

    adv_timer: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    hsn_length: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    roles: Mapped[str] = mapped_column(Text, nullable=False, default="")

    ord_prefix: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    inv_prefix: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    ord_prefix_num: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    default_due_on: Mapped[int] = mapped_column(Integer, nullable=False)
    max_due_on: Mapped[int] = mapped_column(Integer, nullable=False)

    image: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    app_update: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    download_link: Mapped[str] = mapped_column(String(512), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        Index("idx_clients_client_name", "client_name"),
    )

    def __repr__(self) -> str:
        return f"<Client(client_id={self.client_id}, client_name='{self.client_name}')>"
