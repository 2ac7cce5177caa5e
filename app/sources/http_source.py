# app/sources/http_source.py
import logging
from typing import Any, List, Tuple

import requests
from requests.exceptions import RequestException

from app.core.errors import FetchError
from app.core.models import Category, RawRecord
from app.sources.base import IDENTITIES, parse_identities, parse_results

logger = logging.getLogger(__name__)


class HttpIncidentSource:
    """Incident API client: GET /identities/ and GET /incidents/{category}/ with basic auth."""

    def __init__(self, base_url: str, username: str, password: str, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.timeout = timeout

    def url_for(self, endpoint: str) -> str:
        if endpoint == IDENTITIES:
            return f"{self.base_url}/{IDENTITIES}/"
        return f"{self.base_url}/incidents/{endpoint}/"

    def fetch_raw(self, endpoint: str) -> str:
        url = self.url_for(endpoint)
        # one session per call; fetches run on separate threads
        with requests.Session() as session:
            session.auth = (self.username, self.password)
            try:
                res = session.get(url, timeout=self.timeout)
                res.raise_for_status()
            except RequestException as e:
                raise FetchError(endpoint, str(e)) from e
            body = res.text
        logger.debug("returning %d bytes from %s", len(body), endpoint)
        return body

    def fetch_identities(self) -> List[Tuple[str, Any]]:
        pairs = parse_identities(self.fetch_raw(IDENTITIES))
        logger.debug("loaded %d identities", len(pairs))
        return pairs

    def fetch_category(self, category: Category) -> List[RawRecord]:
        return parse_results(self.fetch_raw(category.value), category.value)
