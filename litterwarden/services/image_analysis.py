"""Litter categorisation of evidence photos via Azure Computer Vision."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
from loguru import logger

from litterwarden.core.config import settings
from litterwarden.services.http_client import enrichment_client

API_VERSION = '2023-02-01-preview'
ANALYZE_PATH = '/computervision/imageanalysis:analyze'
LITTER_VOCABULARY = ('trash', 'waste', 'litter', 'garbage', 'pollution', 'dump', 'rubbish')
NO_CATEGORY = 'Analysis Complete - No Category'


class AnalysisFailure(str, Enum):
    SKIPPED = 'Analysis Skipped'
    INVALID_URL = 'Analysis Failed - Invalid URL'
    HTTP_ERROR = 'Analysis Failed'
    ERROR = 'Analysis Error'


@dataclass(frozen=True)
class ImageAnalysis:
    category: str | None = None
    failure: AnalysisFailure | None = None
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def label(self) -> str:
        """Value stored in ``recognized_category``."""
        if self.failure is AnalysisFailure.HTTP_ERROR:
            return f'{self.failure.value} ({self.status_code})'
        if self.failure is not None:
            return self.failure.value
        return self.category or NO_CATEGORY


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


def _confidence(tag: dict[str, Any]) -> float:
    value = tag.get('confidence')
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def _section(payload: dict[str, Any], name: str) -> dict[str, Any]:
    section = payload.get(name)
    return section if isinstance(section, dict) else {}


def choose_category(payload: dict[str, Any]) -> str | None:
    """Pick a category from an analysis payload; entries of the wrong shape are ignored."""
    values = _section(payload, 'tagsResult').get('values')
    if not isinstance(values, list):
        values = []
    tags = [tag for tag in values if isinstance(tag, dict) and isinstance(tag.get('name'), str) and tag['name']]
    for tag in tags:
        if tag['name'].lower() in LITTER_VOCABULARY:
            return _capitalize(tag['name'])
    caption = _section(payload, 'captionResult').get('text')
    if isinstance(caption, str) and caption.strip():
        return caption
    if tags:
        best = max(tags, key=_confidence)
        return _capitalize(best['name'])
    return None


def _is_fetchable(image_url: str) -> bool:
    try:
        url = httpx.URL(image_url)
    except httpx.InvalidURL:
        return False
    return url.scheme in ('http', 'https') and bool(url.host)


def analyze_image(image_url: str, client: httpx.Client | None = None) -> ImageAnalysis:
    key = settings.AZURE_CV_KEY
    endpoint = settings.AZURE_CV_ENDPOINT
    if not key or not endpoint:
        logger.warning('image_analysis.skipped', reason='missing_credentials')
        return ImageAnalysis(failure=AnalysisFailure.SKIPPED)
    if not _is_fetchable(image_url):
        logger.warning('image_analysis.invalid_url', image_url=image_url)
        return ImageAnalysis(failure=AnalysisFailure.INVALID_URL)

    request_url = f"{endpoint.rstrip('/')}{ANALYZE_PATH}"
    try:
        with enrichment_client(client) as http:
            response = http.post(
                request_url,
                params={'api-version': API_VERSION, 'features': 'tags,caption'},
                headers={'Ocp-Apim-Subscription-Key': key},
                json={'url': image_url},
            )
        if response.is_error:
            logger.error('image_analysis.http_error', status_code=response.status_code, body=response.text[:500])
            return ImageAnalysis(failure=AnalysisFailure.HTTP_ERROR, status_code=response.status_code)
        payload = response.json()
    except httpx.TimeoutException:
        logger.warning('image_analysis.timeout', image_url=image_url)
        return ImageAnalysis(failure=AnalysisFailure.SKIPPED)
    except (httpx.HTTPError, ValueError) as exc:
        logger.error('image_analysis.error', error=str(exc))
        return ImageAnalysis(failure=AnalysisFailure.ERROR)

    if not isinstance(payload, dict):
        logger.error('image_analysis.unexpected_payload', payload_type=type(payload).__name__)
        return ImageAnalysis(failure=AnalysisFailure.ERROR)
    try:
        category = choose_category(payload)
    except (AttributeError, KeyError, TypeError) as exc:
        logger.error('image_analysis.unexpected_payload', error=str(exc))
        return ImageAnalysis(failure=AnalysisFailure.ERROR)
    logger.info('image_analysis.completed', category=category)
    return ImageAnalysis(category=category)
