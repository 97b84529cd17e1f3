"""
Audit recording against a real session.

Uses an on-disk SQLite database so savepoint and expiry behaviour is the
database's, not a mock's.
"""

from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from sqlalchemy import event, func, select
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.ext.compiler import compiles

from eduhub.core.database import Base
from eduhub.core.notifications import DeliveryOutcome
from eduhub.modules.audit import service as audit
from eduhub.modules.audit.models import AuditEvent, AuditLog
from eduhub.modules.auth import service as auth
from eduhub.modules.auth.schemas import RegisterRequest
from eduhub.modules.users.models import User


@compiles(JSONB, "sqlite")
def _jsonb_as_json(type_, compiler, **kw):
    return "JSON"


@pytest_asyncio.fixture
async def session(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'audit.db'}")

    # Let SQLAlchemy, not the driver, issue BEGIN so SAVEPOINT nests properly
    @event.listens_for(engine.sync_engine, "connect")
    def _no_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(
            lambda sync_conn: Base.metadata.create_all(
                sync_conn, tables=[User.__table__, AuditLog.__table__]
            )
        )

    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with maker() as db:
        yield db

    await engine.dispose()


async def broken_insert(db, **fields):
    db.add(AuditLog(event_type=None, details={}))
    await db.flush()


async def audit_rows(db) -> int:
    return await db.scalar(select(func.count()).select_from(AuditLog))


class TestRecord:
    @pytest.mark.asyncio
    async def test_writes_row(self, session):
        await audit.record(session, AuditEvent.USER_LOGIN, ip_address="10.0.0.1", details={"via": "web"})

        rows = await audit.list_recent(session)
        assert len(rows) == 1
        assert rows[0].event_type == "USER_LOGIN"
        assert rows[0].details == {"via": "web"}

    @pytest.mark.asyncio
    async def test_failed_write_is_swallowed_and_session_stays_usable(self, session):
        with patch("eduhub.modules.audit.service.repository.create", new=broken_insert):
            await audit.record(session, AuditEvent.USER_LOGIN)

        assert await audit_rows(session) == 0

        await audit.record(session, AuditEvent.USER_LOGIN)
        assert await audit_rows(session) == 1

    @pytest.mark.asyncio
    async def test_failed_write_keeps_committed_objects_loaded(self, session):
        skipped = {"email": DeliveryOutcome.SKIPPED, "sms": DeliveryOutcome.SKIPPED}
        request = RegisterRequest(
            first_name="Thabo",
            last_name="Nkosi",
            id_number="0502125678089",
            email="thabo@test.com",
            phone="0721234567",
            password="secret123",
        )

        with (
            patch("eduhub.modules.audit.service.repository.create", new=broken_insert),
            patch("eduhub.modules.auth.service.dispatch_otp", new=AsyncMock(return_value=skipped)),
        ):
            response = await auth.register(session, request)

        assert response.user.email == "thabo@test.com"
        assert response.user.is_verified is False
        assert await session.scalar(select(func.count()).select_from(User)) == 1
        assert await audit_rows(session) == 0
