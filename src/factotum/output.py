"""Output folder naming: one folder per (host, first path segment)."""

import re
from pathlib import Path
from urllib.parse import unquote, urlparse

from .debug_log import debug
from .errors import OutputDirectoryError

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]+")


def folder_name(url: str) -> str:
    """Derive a filesystem-safe folder name from a URL.

    https://hk.centanet.com/estate/%E5%A4%AA%E5%8F%A4%E5%9F%8E/3-OVDUURFSRJ
        -> hk_centanet_com_estate
    https://www.mannings.com.hk
        -> www_mannings_com_hk
    """
    parsed = urlparse(url)
    parts = unquote(parsed.path).split("/")
    first_part = parts[1] if len(parts) > 1 else ""

    host = parsed.netloc.rpartition("@")[2]
    name = f"{host}_{first_part}" if first_part else host
    return _UNSAFE_CHARS.sub("_", name)


def resolve_output_dir(url: str, root: str = "output") -> Path:
    """Create (if needed) and return the absolute output folder for url.

    Raises:
        OutputDirectoryError: If the folder cannot be created
    """
    path = (Path(root) / folder_name(url)).absolute()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputDirectoryError(f"Cannot create output folder {path}: {e}") from e

    debug("OUTPUT", f"Output folder ready: {path}")
    return path
