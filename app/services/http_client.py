from __future__ import annotations

"""Lightweight HTTP client util for the rate provider.

Uses stdlib urllib; a single GET returning decoded JSON. Failures are
classified so callers can tell a timeout from a transport error or a body
that is not JSON. No retries: the rate cache retries on the next request.
"""
import http.client
import json
import urllib.error
import urllib.request
from typing import Any


class HttpError(Exception):
    pass


class HttpTimeout(HttpError):
    pass


class HttpTransportError(HttpError):
    pass


class HttpDecodeError(HttpError):
    pass


def get_json(url: str, *, timeout: float = 5.0) -> Any:
    try:
        with urllib.request.urlopen(url, timeout=timeout) as resp:  # nosec B310
            data = resp.read()
    except TimeoutError as e:
        raise HttpTimeout(f"Timed out after {timeout}s") from e
    except urllib.error.HTTPError as e:
        raise HttpTransportError(f"HTTP {e.code}") from e
    except urllib.error.URLError as e:
        # Connect timeouts arrive wrapped in URLError
        if isinstance(e.reason, TimeoutError):
            raise HttpTimeout(f"Timed out after {timeout}s") from e
        raise HttpTransportError(str(e.reason)) from e
    except OSError as e:
        raise HttpTransportError(str(e)) from e
    except http.client.HTTPException as e:
        # BadStatusLine, IncompleteRead, LineTooLong are not wrapped by urllib
        raise HttpTransportError(f"{type(e).__name__}: {e}") from e
    try:
        return json.loads(data.decode("utf-8"))
    except ValueError as e:  # JSONDecodeError / UnicodeDecodeError
        raise HttpDecodeError(f"Response body is not valid JSON: {e}") from e
