"""
ClientHub Backend - Migration Tests
====================================

What:  Revision 001 creates the same tables and columns as the ORM models,
       and downgrade() removes them again.
How:   Runs the revision's upgrade()/downgrade() through alembic's Operations
       on a synchronous SQLite engine in tmp_path.
"""

import importlib.util
from pathlib import Path

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations

from clienthub.database import Base
from clienthub.models.admin import Supermaster  # noqa: F401
from clienthub.models.client import Client  # noqa: F401

MIGRATION = Path(__file__).resolve().parents[1] / "alembic" / "versions" / "001_create_clienthub_tables.py"


def _load_revision():
    spec = importlib.util.spec_from_file_location("revision_001", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _run(engine, step):
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            step()


class TestRevision001:

    def test_upgrade_matches_models(self, tmp_path):
        revision = _load_revision()
        engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrate.db'}")

        _run(engine, revision.upgrade)

        inspector = sa.inspect(engine)
        assert set(inspector.get_table_names()) == set(Base.metadata.tables)
        for name, table in Base.metadata.tables.items():
            migrated = {col["name"] for col in inspector.get_columns(name)}
            assert migrated == {col.name for col in table.columns}, name
        indexes = {ix["name"] for ix in inspector.get_indexes("clients")}
        assert "idx_clients_client_name" in indexes
        engine.dispose()

    def test_downgrade_drops_tables(self, tmp_path):
        revision = _load_revision()
        engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrate.db'}")

        _run(engine, revision.upgrade)
        _run(engine, revision.downgrade)

        assert sa.inspect(engine).get_table_names() == []
        engine.dispose()

    def test_defaults_fill_optional_columns(self, tmp_path):
        revision = _load_revision()
        engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrate.db'}")
        _run(engine, revision.upgrade)

        with engine.begin() as conn:
            conn.execute(
                sa.text(
                    "INSERT INTO clients (client_name, license_no, issue_date, duration, "
                    "default_due_on, max_due_on) VALUES ('Acme', 'L1', '2024-01-01', '12', 30, 45)"
                )
            )
            row = conn.execute(
                sa.text("SELECT client_id, app_update, download_link, roles FROM clients")
            ).one()

        assert row.client_id == 1
        assert row.app_update == 0
        assert row.download_link == ""
        assert row.roles == ""
        engine.dispose()
