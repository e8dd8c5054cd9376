from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from urllib.parse import unquote
from uuid import uuid4

from loguru import logger

from litterwarden.core.config import settings

DEFAULT_SUFFIX = '.jpg'
_SUFFIX_PATTERN = re.compile(r'^\.[a-z0-9]{1,8}$')
_KEY_PATTERN = re.compile(r'^[a-f0-9]{32}\.[a-z0-9]{1,8}$')


@dataclass(frozen=True)
class StoredEvidence:
    key: str
    url: str
    path: Path


class EvidenceStore:
    """Evidence photos on local disk, addressed by public URL."""

    def __init__(self, root: Path, url_prefix: str) -> None:
        self._root = Path(root)
        self._url_prefix = url_prefix if url_prefix.endswith('/') else f'{url_prefix}/'

    @property
    def root(self) -> Path:
        return self._root

    def _suffix_for(self, filename: str | None) -> str:
        suffix = Path(filename or '').suffix.lower()
        return suffix if _SUFFIX_PATTERN.match(suffix) else DEFAULT_SUFFIX

    def save(self, data: bytes, filename: str | None = None) -> StoredEvidence:
        self._root.mkdir(parents=True, exist_ok=True)
        key = f'{uuid4().hex}{self._suffix_for(filename)}'
        path = self._root / key
        path.write_bytes(data)
        logger.info('evidence.stored', key=key, size=len(data))
        return StoredEvidence(key=key, url=f'{self._url_prefix}{key}', path=path)

    def key_for_url(self, url: str) -> str | None:
        if not url or not url.startswith(self._url_prefix):
            return None
        key = unquote(url[len(self._url_prefix) :])
        return key if _KEY_PATTERN.match(key) else None

    def path_for_url(self, url: str) -> Path | None:
        key = self.key_for_url(url)
        return self._root / key if key else None

    def delete_url(self, url: str) -> bool:
        """Remove the file behind ``url``. Unknown URLs and missing files are logged, not raised."""
        path = self.path_for_url(url)
        if path is None:
            logger.warning('evidence.delete_skipped', url=url, reason='not_managed')
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning('evidence.delete_missing', url=url)
            return False
        except OSError as exc:
            logger.error('evidence.delete_failed', url=url, error=str(exc))
            return False
        logger.info('evidence.deleted', key=path.name)
        return True


@lru_cache
def get_evidence_store() -> EvidenceStore:
    return EvidenceStore(settings.EVIDENCE_DIR, settings.evidence_url_prefix)


def reset_evidence_store() -> None:
    get_evidence_store.cache_clear()
