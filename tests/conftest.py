"""Pytest configuration and fixtures."""

import pytest
import pytest_asyncio
from sqlalchemy import Column
from sqlalchemy import Float
from sqlalchemy import ForeignKey
from sqlalchemy import Integer
from sqlalchemy import MetaData
from sqlalchemy import String
from sqlalchemy import Table
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from namerec.qbuilder import QueryConfiguration
from namerec.qbuilder import QueryCondition
from namerec.qbuilder import SelectedColumn
from namerec.qbuilder import TableRef
from namerec.qbuilder.settings import get_settings

USERS = [
    {'id': 1, 'name': 'Alice', 'email': 'alice@example.com', 'status': 'active', 'region': 'eu'},
    {'id': 2, 'name': 'Bob', 'email': 'bob@example.com', 'status': 'inactive', 'region': 'us'},
    {'id': 3, 'name': "O'Brien", 'email': 'obrien@example.com', 'status': 'active', 'region': 'us'},
]

ORDERS = [
    {'id': 1, 'user_id': 1, 'region': 'eu', 'total': 10.5},
    {'id': 2, 'user_id': 1, 'region': 'eu', 'total': 20.0},
    {'id': 3, 'user_id': 3, 'region': 'us', 'total': 5.0},
]


@pytest.fixture
def metadata() -> MetaData:
    """Create test metadata with users and orders."""
    metadata = MetaData()

    users = Table(
        'users',
        metadata,
        Column('id', Integer, primary_key=True),
        Column('name', String(100), nullable=False),
        Column('email', String(100), nullable=False),
        Column('status', String(20)),
        Column('region', String(20)),
    )

    Table(
        'orders',
        metadata,
        Column('id', Integer, primary_key=True),
        Column('user_id', Integer, ForeignKey(users.c.id), nullable=False),
        Column('region', String(20)),
        Column('total', Float),
    )

    return metadata


@pytest_asyncio.fixture
async def engine(metadata: MetaData):  # noqa: ANN201
    """Create async engine with populated in-memory database."""
    engine = create_async_engine('sqlite+aiosqlite:///:memory:', poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
        await conn.execute(metadata.tables['users'].insert(), USERS)
        await conn.execute(metadata.tables['orders'].insert(), ORDERS)

    yield engine

    await engine.dispose()


@pytest.fixture
def users_config() -> QueryConfiguration:
    """Configuration reading id and email of active users."""
    return QueryConfiguration(
        selected_tables=(TableRef(name='users', schema='public'),),
        selected_columns=(
            SelectedColumn(table_name='users', column_name='id'),
            SelectedColumn(table_name='users', column_name='email'),
        ),
        conditions=(QueryCondition(column='public.users.status', value='active'),),
    )


@pytest.fixture
def sqlite_users_config() -> QueryConfiguration:
    """Same as users_config, without a schema (SQLite has none)."""
    return QueryConfiguration(
        selected_tables=(TableRef(name='users'),),
        selected_columns=(
            SelectedColumn(table_name='users', column_name='id'),
            SelectedColumn(table_name='users', column_name='email'),
        ),
        conditions=(QueryCondition(column='users.status', value='active'),),
    )


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Isolate tests from QBUILDER_* variables of the host environment."""
    for name in ('DATABASE_URL', 'LOG_LEVEL', 'DEFAULT_SCHEMA', 'DIALECT', 'MAX_ROWS', 'PAGE_SIZE'):
        monkeypatch.delenv(f'QBUILDER_{name}', raising=False)
    get_settings.cache_clear()
