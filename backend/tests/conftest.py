"""Pytest configuration and fixtures."""
import uuid
from datetime import date, datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from nexus_query.core.roles import RoleEnum
from nexus_query.db.base import Base
from nexus_query.engine.scope import ScopeContext
from nexus_query.models import Appointment, DeviceIngestion, InsurancePolicy

BASE_TIME = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

ORG_ID = uuid.UUID("00000000-0000-0000-0000-00000000a001")
OTHER_ORG_ID = uuid.UUID("00000000-0000-0000-0000-00000000a002")
TENANT_ID = uuid.UUID("00000000-0000-0000-0000-00000000b001")
OTHER_TENANT_ID = uuid.UUID("00000000-0000-0000-0000-00000000b002")
PROVIDER_P = uuid.UUID("00000000-0000-0000-0000-00000000c001")
PROVIDER_Q = uuid.UUID("00000000-0000-0000-0000-00000000c002")
PATIENT_ID = uuid.UUID("00000000-0000-0000-0000-00000000d001")
ROOM_A = uuid.UUID("00000000-0000-0000-0000-00000000e001")
ROOM_B = uuid.UUID("00000000-0000-0000-0000-00000000e002")


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite shared across connections of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


def make_context(role=RoleEnum.MEDICAL_DOCTOR, principal_id=PROVIDER_P, **kwargs) -> ScopeContext:
    kwargs.setdefault("organization_id", ORG_ID)
    kwargs.setdefault("tenant_id", TENANT_ID)
    return ScopeContext(principal_id=principal_id, role=role, **kwargs)


@pytest.fixture
def doctor_p() -> ScopeContext:
    return make_context()


@pytest.fixture
def org_admin() -> ScopeContext:
    return make_context(RoleEnum.ORGANIZATION_ADMIN, principal_id=uuid.uuid4())


@pytest.fixture
def system_admin() -> ScopeContext:
    return make_context(RoleEnum.SYSTEM_ADMIN, principal_id=uuid.uuid4(), organization_id=None, tenant_id=None)


def make_appointment(provider_id, index, organization_id=ORG_ID, **overrides) -> Appointment:
    start = BASE_TIME + timedelta(hours=index)
    values = dict(
        id=uuid.uuid4(),
        organization_id=organization_id,
        provider_id=provider_id,
        patient_id=PATIENT_ID,
        room_id=None,
        status="scheduled",
        appointment_type="checkup",
        title=f"Visit {index:02d}",
        notes=None,
        start_time=start,
        end_time=start + timedelta(minutes=30),
        created_at=BASE_TIME - timedelta(days=1) + timedelta(minutes=index),
        updated_at=BASE_TIME - timedelta(days=1) + timedelta(minutes=index),
        deleted_at=None,
    )
    values.update(overrides)
    return Appointment(**values)


def _room_for(index: int):
    return (None, ROOM_A, ROOM_B)[index % 3]


@pytest_asyncio.fixture
async def appointments(db):
    """23 appointments for provider P, 5 for provider Q, all in the same organization."""
    rows = [make_appointment(PROVIDER_P, i, room_id=_room_for(i)) for i in range(23)]
    rows += [make_appointment(PROVIDER_Q, 100 + i, title=f"Other {i}") for i in range(5)]
    db.add_all(rows)
    await db.commit()
    return rows


@pytest_asyncio.fixture
async def policies(db):
    rows = [
        InsurancePolicy(
            id=uuid.uuid4(),
            organization_id=ORG_ID,
            patient_id=PATIENT_ID,
            policy_number="PN-1001",
            payer_name="Acme Health",
            group_number="G-7",
            plan_type="ppo",
            policy_status="active",
            coverage_start_date=date(2024, 1, 1),
            coverage_end_date=date(2024, 12, 31),
            created_at=BASE_TIME,
            updated_at=BASE_TIME,
        ),
        InsurancePolicy(
            id=uuid.uuid4(),
            organization_id=ORG_ID,
            patient_id=PATIENT_ID,
            policy_number="PN-2002",
            payer_name="Blue Meadow",
            group_number=None,
            plan_type="hmo",
            policy_status="pending",
            coverage_start_date=date(2024, 6, 1),
            coverage_end_date=None,
            created_at=BASE_TIME + timedelta(hours=1),
            updated_at=BASE_TIME + timedelta(hours=1),
        ),
        InsurancePolicy(
            id=uuid.uuid4(),
            organization_id=OTHER_ORG_ID,
            patient_id=PATIENT_ID,
            policy_number="PN-3003",
            payer_name="Acme Health",
            group_number=None,
            plan_type="ppo",
            policy_status="active",
            coverage_start_date=date(2024, 2, 1),
            coverage_end_date=None,
            created_at=BASE_TIME + timedelta(hours=2),
            updated_at=BASE_TIME + timedelta(hours=2),
        ),
    ]
    db.add_all(rows)
    await db.commit()
    return rows


@pytest_asyncio.fixture
async def readings(db):
    rows = []
    for i in range(6):
        rows.append(
            DeviceIngestion(
                id=uuid.uuid4(),
                tenant_id=TENANT_ID if i < 4 else OTHER_TENANT_ID,
                device_id=f"pulse-{i}",
                metric="heart_rate",
                value=60.0 + i * 5,
                unit="bpm" if i % 2 == 0 else None,
                payload_status="accepted",
                ingested_at=BASE_TIME + timedelta(minutes=i),
                created_at=BASE_TIME + timedelta(minutes=i),
            )
        )
    db.add_all(rows)
    await db.commit()
    return rows


class RecordingSession:
    """Stands in for AsyncSession: counts store calls and optionally fails them."""

    def __init__(self, error: Exception | None = None):
        self.calls = 0
        self.error = error

    async def execute(self, *args, **kwargs):
        self.calls += 1
        if self.error is not None:
            raise self.error
        raise AssertionError("store was not expected to be reached")
