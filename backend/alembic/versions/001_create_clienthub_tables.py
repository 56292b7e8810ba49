"""Create supermasters and clients tables

Revision ID: 001
Revises: None
Create Date: 2024-06-10 00:00:00.000000+00:00

What:  Creates `supermasters` (administrator credentials) and `clients`.
How:   Portable column types only, so the same revision runs on PostgreSQL
       and on the SQLite databases used by tests and local runs.

Rollback: downgrade() drops both tables (destructive, all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "supermasters",
        sa.Column("username", sa.String(100), nullable=False, comment="Unique login name"),
        sa.Column("password", sa.String(255), nullable=False, comment="Salted one-way password hash"),
        sa.Column(
            "logged_out_at",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="When the administrator last logged out (UTC)",
        ),
        sa.PrimaryKeyConstraint("username"),
    )

    op.create_table(
        "clients",
        sa.Column("client_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("license_no", sa.String(100), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(50), nullable=False, server_default=""),
        sa.Column("duration", sa.String(50), nullable=False),
        sa.Column("plan_name", sa.String(100), nullable=False, server_default=""),
        sa.Column("customers_login", sa.String(255), nullable=False, server_default=""),
        sa.Column("sales_mgr_login", sa.String(255), nullable=False, server_default=""),
        sa.Column("superadmin_login", sa.String(255), nullable=False, server_default=""),
        sa.Column("client_address", sa.Text(), nullable=False, server_default=""),
        sa.Column("product_prefix", sa.String(20), nullable=False, server_default=""),
        sa.Column("customer_prefix", sa.String(20), nullable=False, server_default=""),
        sa.Column("sm_prefix", sa.String(20), nullable=False, server_default=""),
        sa.Column("adv_timer", sa.Integer(), nullable=True),
        sa.Column("hsn_length", sa.Integer(), nullable=True),
        sa.Column("roles", sa.Text(), nullable=False, server_default=""),
        sa.Column("ord_prefix", sa.String(20), nullable=False, server_default=""),
        sa.Column("inv_prefix", sa.String(20), nullable=False, server_default=""),
        sa.Column("ord_prefix_num", sa.Integer(), nullable=True),
        sa.Column("default_due_on", sa.Integer(), nullable=False),
        sa.Column("max_due_on", sa.Integer(), nullable=False),
        sa.Column("image", sa.String(255), nullable=True, comment="Stored asset name"),
        sa.Column("app_update", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("download_link", sa.String(512), nullable=False, server_default=""),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("client_id"),
    )

    # client_status does a substring search; the index still helps prefix scans
    op.create_index("idx_clients_client_name", "clients", ["client_name"])


def downgrade() -> None:
    op.drop_index("idx_clients_client_name", table_name="clients")
    op.drop_table("clients")
    op.drop_table("supermasters")
