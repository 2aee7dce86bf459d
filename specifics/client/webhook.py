"""
Workflow automation webhook - best-effort forwarding of finished analyses.
"""
import logging
from typing import Any, Optional

import requests


logger = logging.getLogger(__name__)


def forward_to_webhook(
    url: str,
    payload: dict[str, Any],
    timeout: float = 10.0,
    session: Optional[requests.Session] = None,
) -> bool:
    """
    POST the payload as JSON. Failures are logged, never raised:
    the listing flow does not depend on the automation.
    """
    if not url:
        return False
    try:
        response = (session or requests).post(url, json=payload, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning(f"Webhook forward failed: {e}")
        return False
    logger.info(f"Forwarded analysis to webhook ({response.status_code})")
    return True
