"""Download remote card images into the local media cache."""

from __future__ import annotations

import hashlib
import mimetypes
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional
from urllib.parse import urlparse

import requests
from flask import current_app

from flashy_app.core.error_handlers import UpstreamError, ValidationError
from flashy_app.core.logging_config import get_logger

logger = get_logger('decks.media')


@dataclass
class FetchReport:
    """Outcome of a concurrent batch of downloads, keyed by source URL."""

    stored: Dict[str, str] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)


class MediaService:
    USER_AGENT = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    )
    CHUNK_SIZE = 32768

    def __init__(
        self,
        cache_dir: str,
        url_prefix: str,
        max_bytes: int = 5 * 1024 * 1024,
        timeout: int = 20,
        workers: int = 4,
    ):
        self.cache_dir = cache_dir
        self.url_prefix = url_prefix.rstrip('/')
        self.max_bytes = max_bytes
        self.timeout = timeout
        self.workers = max(1, workers)

    @classmethod
    def from_app(cls, app=None) -> 'MediaService':
        config = (app or current_app).config
        return cls(
            cache_dir=config['MEDIA_CACHE_DIR'],
            url_prefix=config['MEDIA_URL_PREFIX'],
            max_bytes=config['MEDIA_MAX_BYTES'],
            timeout=config['MEDIA_FETCH_TIMEOUT'],
            workers=config['MEDIA_FETCH_WORKERS'],
        )

    def is_local(self, url: str) -> bool:
        return url.startswith(self.url_prefix + '/')

    @staticmethod
    def _guess_extension(url: str, content_type: str) -> str:
        extension = mimetypes.guess_extension(content_type.split(';')[0].strip()) if content_type else None
        if not extension:
            extension = os.path.splitext(urlparse(url).path)[1]
        if extension in ('.jpe', '.jpeg'):
            extension = '.jpg'
        return extension or '.img'

    def fetch_image(self, url: str) -> str:
        """
        Store the image at ``url`` and return its local URL.

        Raises:
            ValidationError: not an http(s) URL, not an image, or too large.
            UpstreamError: the request failed.
        """
        if self.is_local(url):
            return url
        if urlparse(url).scheme not in ('http', 'https'):
            raise ValidationError('Image URL must be http or https', errors={'url': url})

        digest = hashlib.sha1(url.encode('utf-8')).hexdigest()
        try:
            response = requests.get(url, timeout=self.timeout, stream=True, headers={"User-Agent": self.USER_AGENT})
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.debug("Could not download image %s: %s", url, exc)
            raise UpstreamError(f"Could not download image: {exc}", url=url) from exc

        content_type = response.headers.get('Content-Type', '').lower()
        if not content_type.startswith('image/'):
            response.close()
            raise ValidationError('URL does not point to an image', errors={'url': url, 'content_type': content_type})

        os.makedirs(self.cache_dir, exist_ok=True)
        filename = f"{digest}{self._guess_extension(url, content_type)}"
        cache_path = os.path.join(self.cache_dir, filename)

        total_bytes = 0
        try:
            with open(cache_path, 'wb') as file_handle:
                for chunk in response.iter_content(chunk_size=self.CHUNK_SIZE):
                    if not chunk:
                        continue
                    total_bytes += len(chunk)
                    if total_bytes > self.max_bytes:
                        raise ValidationError(
                            f"Image is larger than {self.max_bytes // (1024 * 1024)} MB",
                            errors={'url': url},
                        )
                    file_handle.write(chunk)
        except Exception:
            if os.path.exists(cache_path):
                os.remove(cache_path)
            raise
        finally:
            response.close()

        return f"{self.url_prefix}/{filename}"

    def fetch_many(self, urls: Iterable[Optional[str]]) -> FetchReport:
        """
        Download every distinct URL concurrently. One failure never stops
        the others; it is recorded in ``failed`` with its message.
        """
        unique = list(dict.fromkeys(u for u in urls if u))
        report = FetchReport()
        if not unique:
            return report

        with ThreadPoolExecutor(max_workers=min(self.workers, len(unique))) as pool:
            futures = {url: pool.submit(self.fetch_image, url) for url in unique}
            for url, future in futures.items():
                try:
                    report.stored[url] = future.result()
                except (UpstreamError, ValidationError) as exc:
                    report.failed[url] = exc.message
                except OSError as exc:
                    logger.warning("Could not store image %s: %s", url, exc, exc_info=True)
                    report.failed[url] = f"Could not store image: {exc}"

        logger.info("Fetched %d images, %d failed", len(report.stored), len(report.failed))
        return report
