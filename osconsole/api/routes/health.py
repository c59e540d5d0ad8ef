from fastapi import APIRouter

from osconsole.core.config import settings

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok", "env": settings.env}
