from __future__ import annotations

from ncdudiff.domain.constants import APP_NAME, APP_VERSION

USER_AGENT = f"{APP_NAME}/{APP_VERSION}"
DEFAULT_TIMEOUT = 10
