from typing import Callable, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import REQUEST_TIMEOUT
from .utils import is_url


class FetchError(RuntimeError):
    """A source file could not be read."""


def build_session() -> requests.Session:
    """Create a requests session with retry/backoff and a User-Agent."""
    sess = requests.Session()
    retry = Retry(
        total=3,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods={"GET", "HEAD"},
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    sess.mount("http://", adapter)
    sess.mount("https://", adapter)
    sess.headers.update({"User-Agent": "texpaper/1.0"})
    return sess


def fetch_text(
    source: str,
    session: Optional[requests.Session] = None,
    log_fn: Callable[[str], None] = lambda _msg: None,
) -> str:
    """Read a .tex or .bib source from a URL or a local path as UTF-8 text."""
    if not is_url(source):
        log_fn(f"Reading {source}")
        try:
            with open(source, "r", encoding="utf-8", errors="replace") as f:
                return f.read()
        except OSError as exc:
            raise FetchError(f"Could not read {source}: {exc}") from exc

    log_fn(f"Requesting {source}")
    session = session or build_session()
    try:
        resp = session.get(source, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
    except requests.HTTPError as exc:
        status = exc.response.status_code if exc.response is not None else "unknown"
        log_fn(f"Request failed for {source}: {exc}")
        raise FetchError(f"Request failed with status {status}") from exc
    except requests.RequestException as exc:
        log_fn(f"Request failed for {source}: {exc}")
        raise FetchError(f"Request failed for {source}: {exc}") from exc
    return resp.content.decode("utf-8", errors="replace")
