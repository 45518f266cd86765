from __future__ import annotations

import json
from http.client import HTTPException
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from .base import ProviderError

DEFAULT_USER_AGENT = "weather-lookup/0.1"


def fetch_json(
    url: str,
    *,
    provider: str,
    params: dict[str, str] | None = None,
    timeout: float,
    user_agent: str = DEFAULT_USER_AGENT,
) -> dict[str, Any]:
    """GET ``url`` and decode a JSON object body.

    Error messages never include the query string, which may carry credentials.
    """
    full_url = f"{url}?{urlencode(params)}" if params else url
    request = Request(full_url, headers={"User-Agent": user_agent, "Accept": "application/json"})
    try:
        with urlopen(request, timeout=timeout) as response:
            payload = json.loads(response.read().decode("utf-8"))
    except HTTPError as exc:
        raise ProviderError(f"{provider} returned HTTP {exc.code}") from exc
    except (URLError, TimeoutError) as exc:
        raise ProviderError(f"{provider} request failed or timed out") from exc
    except HTTPException as exc:
        raise ProviderError(f"{provider} returned an incomplete response") from exc
    except ValueError as exc:
        raise ProviderError(f"{provider} returned a non-JSON body") from exc
    except OSError as exc:
        raise ProviderError(f"{provider} connection error") from exc

    if not isinstance(payload, dict):
        raise ProviderError(f"Unexpected {provider} response shape")
    return payload
