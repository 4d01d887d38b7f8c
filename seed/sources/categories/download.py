# seed/sources/categories/download.py
#
# IO-only: fetch the trade categories feed and save it to the raw directory.
#
# Design decisions:
#   - The feed is a single JSON document of a few hundred KB, so it is read
#     in one request rather than streamed.
#   - follow_redirects is enabled because the feed sits behind a CDN.
#   - Connection failures are retried by the httpx transport. HTTP error
#     statuses are not retried and raise immediately.
#   - Cache: if the file already exists on disk, the download is skipped.
#   - Only the cache path is unit-tested; the fetch needs network access.
from __future__ import annotations

from pathlib import Path

import httpx

from licensing.log import Logger

CATEGORIES_FILE = "categories.json"


def download_categories(
    url: str, raw_dir: Path, logger: Logger, timeout: int = 15, retries: int = 3
) -> Path:
    """Download the categories feed and return the path of the saved JSON.

    Raises:
        httpx.HTTPError: if the HTTP request fails.
    """
    raw_dir.mkdir(parents=True, exist_ok=True)
    json_path = raw_dir / CATEGORIES_FILE

    if json_path.exists() and json_path.stat().st_size > 0:
        logger.info(f"{CATEGORIES_FILE}: already exists, skipping download")
        return json_path

    logger.info(f"Fetching categories from {url}")
    transport = httpx.HTTPTransport(retries=retries)
    with httpx.Client(transport=transport, timeout=timeout, follow_redirects=True) as client:
        response = client.get(url)
        response.raise_for_status()
    json_path.write_bytes(response.content)
    logger.info(f"{CATEGORIES_FILE}: {len(response.content) // 1024} KB saved")
    return json_path
