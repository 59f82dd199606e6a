from __future__ import annotations

import logging
from typing import Optional

import requests

from ncdudiff.infra.network.common import DEFAULT_TIMEOUT, USER_AGENT

logger = logging.getLogger(__name__)


def fetch_report_text(url: str, timeout: Optional[int] = None) -> str:
    """
    Download one ncdu report over HTTP(S).

    Failures are logged and re-raised unchanged; the caller decides what the
    user sees.
    """
    headers = {"User-Agent": USER_AGENT}
    effective_timeout = timeout or DEFAULT_TIMEOUT
    logger.debug(f"Network: Downloading report from {url}")

    try:
        response = requests.get(url, headers=headers, timeout=effective_timeout)
        response.raise_for_status()
    except requests.exceptions.Timeout:
        logger.error(f"Network: Report download timed out after {effective_timeout}s: {url}")
        raise
    except requests.exceptions.RequestException as e:
        logger.error(f"Network: Communication error while downloading {url}: {e}")
        raise

    size_kb = len(response.content) / 1024
    logger.info(f"Network: Report downloaded ({size_kb:.1f} KB) from {url}")
    return response.text
