"""
ClientHub Backend - Database Layer Tests
=========================================

What:  AdmissionGate limits, the session dependency's commit/rollback
       contract, and the 503 response when the gate is saturated.
"""

from unittest.mock import patch

import pytest
from sqlalchemy import select

from clienthub.database import AdmissionGate, async_session_factory, get_db_session
from clienthub.exceptions import ServiceBusyError
from clienthub.models.admin import Supermaster


class TestAdmissionGate:

    @pytest.mark.asyncio
    async def test_rejects_beyond_capacity(self):
        gate = AdmissionGate(capacity=2)

        async with gate.admit():
            async with gate.admit():
                assert gate.in_flight == 2
                with pytest.raises(ServiceBusyError) as exc_info:
                    async with gate.admit():
                        pass
                assert exc_info.value.status_code == 503
                assert exc_info.value.context == {"in_flight": 2, "capacity": 2}

        assert gate.in_flight == 0

    @pytest.mark.asyncio
    async def test_slot_released_on_error(self):
        gate = AdmissionGate(capacity=1)

        with pytest.raises(RuntimeError):
            async with gate.admit():
                raise RuntimeError("handler failed")

        async with gate.admit():
            assert gate.in_flight == 1


class TestSessionDependency:

    @pytest.mark.asyncio
    async def test_commits_on_success(self, db_schema):
        dependency = get_db_session()
        session = await dependency.__anext__()
        session.add(Supermaster(username="committed", password="x"))
        with pytest.raises(StopAsyncIteration):
            await dependency.__anext__()

        async with async_session_factory() as check:
            found = (await check.execute(select(Supermaster.username))).scalars().all()
        assert found == ["committed"]

    @pytest.mark.asyncio
    async def test_rolls_back_on_error(self, db_schema):
        dependency = get_db_session()
        session = await dependency.__anext__()
        session.add(Supermaster(username="discarded", password="x"))
        await session.flush()
        with pytest.raises(ValueError):
            await dependency.athrow(ValueError("route failed"))

        async with async_session_factory() as check:
            found = (await check.execute(select(Supermaster.username))).scalars().all()
        assert found == []


class TestServiceBusyResponse:

    @pytest.mark.asyncio
    async def test_saturated_gate_returns_503_with_retry_after(self, test_client):
        with patch("clienthub.database.admission_gate", AdmissionGate(capacity=0)):
            response = await test_client.get("/api/client_status/acme")

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "1"
        assert response.json()["error"] == "service_busy"
