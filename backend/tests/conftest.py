from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from gagyebu.api.deps import get_assistant, get_receipts
from gagyebu.core.db import get_session
from gagyebu.main import app
from gagyebu.models import budget_goal as _budget_goal  # noqa: F401
from gagyebu.models import household as _household  # noqa: F401
from gagyebu.models import payment_method as _payment_method  # noqa: F401
from gagyebu.models import recurring_transaction as _recurring_transaction  # noqa: F401
from gagyebu.models import tag_color as _tag_color  # noqa: F401
from gagyebu.models import transaction as _transaction  # noqa: F401
from gagyebu.models import user as _user  # noqa: F401
from gagyebu.services.ai.keyword_provider import KeywordAssistantProvider
from gagyebu.services.receipt_storage import ReceiptStorage


@pytest.fixture
def receipt_storage(tmp_path: Path) -> ReceiptStorage:
    return ReceiptStorage(base_dir=tmp_path / "receipts", public_base_url="/receipts", max_upload_mb=1)


@pytest.fixture
async def client(receipt_storage: ReceiptStorage) -> AsyncIterator[AsyncClient]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async def override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_receipts] = lambda: receipt_storage
    app.dependency_overrides[get_assistant] = lambda: KeywordAssistantProvider()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client

    app.dependency_overrides.clear()
    await engine.dispose()
