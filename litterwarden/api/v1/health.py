from fastapi import APIRouter

from litterwarden.core.config import settings

router = APIRouter()


@router.get('/health')
def health() -> dict:
    return {'status': 'ok', 'project': settings.PROJECT_NAME}
