from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from litterwarden.api.v1.router import api_router
from litterwarden.core.config import settings
from litterwarden.core.logging import configure_logging
from litterwarden.db.init_db import init_db

configure_logging(settings.LOG_LEVEL)


def _warn_missing_enrichment() -> None:
    if not settings.GOOGLE_MAPS_API_KEY:
        logger.warning('startup.geocoding_disabled', reason='GOOGLE_MAPS_API_KEY is not set')
    if not settings.AZURE_CV_KEY or not settings.AZURE_CV_ENDPOINT:
        logger.warning('startup.image_analysis_disabled', reason='AZURE_CV credentials are not set')


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    _warn_missing_enrichment()
    logger.info('startup.ready', evidence_dir=str(settings.EVIDENCE_DIR))
    yield

app = FastAPI(title=settings.PROJECT_NAME, debug=settings.DEBUG, lifespan=lifespan)

allow_origins = settings.CORS_ORIGINS
allow_credentials = '*' not in allow_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {'loc': [str(part) for part in error.get('loc', ())], 'msg': error.get('msg', '')}
        for error in exc.errors()
    ]
    logger.info('request.invalid', path=request.url.path, errors=errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': 'Invalid input data.', 'errors': errors},
    )


app.include_router(api_router)

settings.EVIDENCE_DIR.mkdir(parents=True, exist_ok=True)
app.mount(settings.MEDIA_URL_PATH, StaticFiles(directory=settings.EVIDENCE_DIR), name='evidence')


@app.get('/', include_in_schema=False, response_class=PlainTextResponse)
def root() -> str:
    return 'LitterWarden Server is running!'
