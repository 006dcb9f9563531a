from sqlmodel.ext.asyncio.session import AsyncSession

from .db_engine import engine


async def get_async_session():
    # 提交后不让对象过期，判题过程中还需要继续读取已提交对象的属性
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session
