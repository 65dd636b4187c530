from importlib.metadata import PackageNotFoundError, version
import logging
import platform
from typing import Dict, Optional


LOG = logging.getLogger(__name__)


def get_version() -> Optional[str]:
    """
    Get the version of the tinyrna-setup package.

    Returns:
      Optional[str]: The version if found, otherwise None.
    """
    try:
        return version("tinyrna-setup")
    except PackageNotFoundError:
        LOG.exception("Unable to get tinyrna-setup version.")
        return None


def get_user_agent() -> str:
    """
    Get the user agent string for HTTP requests.

    Returns:
      str: The user agent string in the format: tinyrna-setup/{version} ({os} {arch}; Python/{python_version})
    """
    setup_version = get_version() or "unknown"
    os_name = platform.system()
    arch = platform.machine() or "unknown"
    python_version = platform.python_version()

    return f"tinyrna-setup/{setup_version} ({os_name} {arch}; Python/{python_version})"


def get_meta_http_headers() -> Dict[str, str]:
    return {"User-Agent": get_user_agent()}
