from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies.services import AdminUser, get_postgres_tester
from app.services.postgres import TRANSIENT_ERRORS, PostgresConnectionTester

router = APIRouter(prefix="/ping", tags=["health"])


@router.get("", summary="Public health probe")
async def ping() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/database", summary="Database connectivity probe")
async def ping_database(
    _: AdminUser,
    tester: Annotated[PostgresConnectionTester, Depends(get_postgres_tester)],
) -> dict[str, str]:
    try:
        await tester.test_connection()
    except TRANSIENT_ERRORS as exc:
        raise HTTPException(status_code=503, detail="Database unavailable") from exc
    return {"status": "ok"}
