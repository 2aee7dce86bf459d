"""
Image download helpers - photos become data: URLs for the vision model.
"""
import base64
import logging
from typing import Optional, Sequence

import requests
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)


logger = logging.getLogger(__name__)

CLOUDINARY_TRANSFORM = "w_1024,h_1024,c_limit,q_auto,f_jpg"


def optimize_image_url(url: str) -> str:
    """Ask Cloudinary for a bounded JPEG instead of the original upload."""
    if "cloudinary.com" in url and "/upload/" in url:
        return url.replace("/upload/", f"/upload/{CLOUDINARY_TRANSFORM}/", 1)
    return url


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=5),
    retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
    reraise=True,
)
def _download(session: requests.Session, url: str, timeout: float) -> requests.Response:
    response = session.get(url, timeout=timeout)
    response.raise_for_status()
    return response


def fetch_image_data_urls(
    urls: Sequence[str],
    limit: int = 12,
    session: Optional[requests.Session] = None,
    timeout: float = 20.0,
) -> list[str]:
    """
    Download up to `limit` images and encode each as a data: URL.

    Raises:
        requests.HTTPError: If any image cannot be downloaded
    """
    session = session or requests.Session()
    data_urls: list[str] = []

    for url in list(urls)[:limit]:
        response = _download(session, optimize_image_url(url), timeout)
        mime_type = response.headers.get("content-type", "image/jpeg").split(";")[0].strip()
        encoded = base64.b64encode(response.content).decode("ascii")
        data_urls.append(f"data:{mime_type};base64,{encoded}")

    logger.info(f"Downloaded {len(data_urls)} of {len(urls)} images")
    return data_urls
