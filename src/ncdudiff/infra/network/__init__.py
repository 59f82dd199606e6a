from __future__ import annotations

"""
Network Communication Infrastructure.

Facade over the HTTP clients used to fetch remote reports.
"""

from ncdudiff.infra.network.common import DEFAULT_TIMEOUT, USER_AGENT
from ncdudiff.infra.network.report_client import fetch_report_text

__all__ = [
    "DEFAULT_TIMEOUT",
    "USER_AGENT",
    "fetch_report_text",
]
