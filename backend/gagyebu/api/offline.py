from fastapi import APIRouter

from gagyebu.offline.strategies import offline_manifest

router = APIRouter(prefix="/offline", tags=["offline"])


@router.get("/manifest")
async def manifest() -> dict:
    return offline_manifest()
