"""Shared test fixtures for async database, sessions, settings, and auth tokens."""

import uuid
from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from outreach_api.core.config import Settings
from outreach_api.core.security import create_access_token
from outreach_api.models import Prayer, Representative, User, UserAddress
from outreach_api.models.base import Base


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key-not-for-production",
        jwt_algorithm="HS256",
        congress_gov_api_key="congress-test-key",
        open_states_api_key="openstates-test-key",
        google_civic_api_key="civic-test-key",
        upstream_retry_delay=0,
        postmark_server_token="postmark-test-token",
        email_from="outreach@example.org",
        postmark_template_alias="",
        site_url="https://example.org",
        admin_secret=None,
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create a per-test async session."""
    session_factory = async_sessionmaker(async_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def sample_user(async_session: AsyncSession) -> User:
    """Create a free-tier user with an email."""
    user = User(id=uuid.uuid4(), username="faithful", email="faithful@example.org", tier="free")
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user


@pytest.fixture
async def other_user(async_session: AsyncSession) -> User:
    user = User(id=uuid.uuid4(), username="neighbor", email="neighbor@example.org", tier="free")
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user


@pytest.fixture
async def sample_prayer(async_session: AsyncSession, sample_user: User) -> Prayer:
    prayer = Prayer(author_id=sample_user.id, content="Lord, grant our leaders wisdom.\nAmen.")
    async_session.add(prayer)
    await async_session.commit()
    await async_session.refresh(prayer)
    return prayer


@pytest.fixture
async def ga_address(async_session: AsyncSession, sample_user: User) -> UserAddress:
    """Primary Georgia address with all three districts detected."""
    address = UserAddress(
        user_id=sample_user.id,
        postal_code="30303",
        state="GA",
        cd="5",
        sd="36",
        hd="58",
        is_primary=True,
    )
    async_session.add(address)
    await async_session.commit()
    await async_session.refresh(address)
    return address


def make_representative(**overrides: object) -> Representative:
    """Build a directory row with sensible defaults."""
    fields: dict[str, object] = {
        "external_id": f"ext-{uuid.uuid4().hex[:8]}",
        "source": "congress_gov",
        "name": "Jane Doe",
        "office_name": "U.S. Senator",
        "level": "federal",
        "chamber": "senate",
        "state": "GA",
        "district": None,
        "email": "office@example.gov",
    }
    fields.update(overrides)
    return Representative(**fields)


@pytest.fixture
def make_rep():
    """Factory fixture wrapping make_representative."""
    return make_representative


@pytest.fixture
async def ga_directory(async_session: AsyncSession) -> dict[str, Representative]:
    """Two senators, the GA-5 House member, and the SD-36/HD-58 legislators."""
    reps = {
        "senator_a": make_representative(external_id="O000174", name="Jon Ossoff"),
        "senator_b": make_representative(external_id="W000790", name="Raphael Warnock"),
        "house": make_representative(
            external_id="W000788",
            name="Nikema Williams",
            office_name="U.S. Representative",
            chamber="house",
            district="5",
        ),
        "state_senator": make_representative(
            external_id="ocd-person/sd36",
            source="open_states",
            name="Nan Orrock",
            office_name="State Senator",
            level="state",
            chamber="senate",
            district="36",
        ),
        "state_rep": make_representative(
            external_id="ocd-person/hd58",
            source="open_states",
            name="Park Cannon",
            office_name="State Representative",
            level="state",
            chamber="house",
            district="58",
            email=None,
        ),
    }
    async_session.add_all(reps.values())
    await async_session.commit()
    for rep in reps.values():
        await async_session.refresh(rep)
    return reps


@pytest.fixture
def user_token(settings: Settings, sample_user: User) -> str:
    """Bearer token for ``sample_user``."""
    return create_access_token(sample_user.id, settings.jwt_secret_key, settings.jwt_algorithm)


@pytest.fixture
def other_token(settings: Settings, other_user: User) -> str:
    return create_access_token(other_user.id, settings.jwt_secret_key, settings.jwt_algorithm)
