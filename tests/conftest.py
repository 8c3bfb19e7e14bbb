"""
Pytest configuration and fixtures
"""

from pathlib import Path
from typing import AsyncGenerator, Callable, List

import pytest
import pytest_asyncio
from sqlalchemy import Column, MetaData, String, Table, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from models.base import Base
from models.customer import Customer  # noqa: F401
from models.organization import Organization  # noqa: F401

# Small tables for scenario tests, alongside the real models
test_metadata = MetaData()

people = Table(
    "people",
    test_metadata,
    Column("id", String(50), primary_key=True),
    Column("name", String(255)),
)

pets = Table(
    "pets",
    test_metadata,
    Column("id", String(50), primary_key=True),
    Column("name", String(255)),
)


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """SQLite file database with all tables created"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite'}",
        echo=False,
        poolclass=NullPool,  # Fresh connection per transaction, like a real run
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.run_sync(test_metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def write_csv(tmp_path) -> Callable[..., Path]:
    """Write CSV text to a file under tmp_path and return its path"""
    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


async def _count_rows(engine: AsyncEngine, table_name: str) -> int:
    async with engine.connect() as conn:
        result = await conn.execute(text(f'SELECT count(*) FROM "{table_name}"'))
        return result.scalar_one()


async def _fetch_ids(engine: AsyncEngine, table_name: str, id_column: str = "id") -> List[str]:
    """Primary keys in insertion (rowid) order"""
    async with engine.connect() as conn:
        result = await conn.execute(text(f'SELECT "{id_column}" FROM "{table_name}" ORDER BY rowid'))
        return [row[0] for row in result]


@pytest.fixture
def count_rows():
    return _count_rows


@pytest.fixture
def fetch_ids():
    return _fetch_ids


@pytest.fixture
def customers_csv() -> str:
    """Two customers in the dump's column layout"""
    return (
        "Index,Customer Id,First Name,Last Name,Company,City,Country,Phone 1,Phone 2,Email,Subscription Date,Website\n"
        "1,DD37Cf93aecA6Dc,Sheryl,Baxter,Rasmussen Group,East Leonard,Chile,229.077.5154,397.884.0519x718,"
        "zunigavanessa@smith.info,2020-08-24,http://www.stephenson.com/\n"
        "2,1Ef7b82A4CAAD10,Preston,Lozano,Vega-Gentry,East Jimmychester,Djibouti,5153435776,686-620-1820x944,"
        "vmata@colon.com,2021-04-23,http://www.hobbs.com/\n"
    )


@pytest.fixture
def organizations_csv() -> str:
    """Three organizations in the dump's column layout"""
    return (
        "Index,Organization Id,Name,Website,Country,Description,Founded,Industry,Number of employees\n"
        "1,FAB0d41d5b5d22c,Ferrell LLC,https://price.net/,Papua New Guinea,"
        "Horizontal empowering knowledgebase,1990,Plastics,3498\n"
        "2,6A7EdDEA9FaDC52,\"Mckinney, Riley and Day\",http://www.hall-buchanan.info/,Finland,"
        "User-centric system-worthy leverage,2015,Glass / Ceramics / Concrete,4952\n"
        "3,0bFED1ADAE4bcC1,Hester Ltd,http://sullivan-reed.com/,China,"
        "Switchable scalable moratorium,1971,Public Safety,5287\n"
    )
