"""requests session factory with retry logic for the JSON services we call."""

import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger("jobsforce.http")

USER_AGENT = "jobsforce-backend/0.1 (+https://github.com/jobsforce)"

RETRY_STATUSES = (429, 500, 502, 503, 504)


def create_session(
    max_retries: int = 2,
    backoff_factor: float = 0.5,
    allowed_methods: tuple[str, ...] = ("GET", "POST"),
) -> requests.Session:
    """Create a requests session that retries transient upstream failures.

    POST is retried by default: the scoring endpoint is a read-only query,
    so replaying it is safe.
    """
    session = requests.Session()

    retry_strategy = Retry(
        total=max_retries,
        connect=max_retries,
        read=0,
        backoff_factor=backoff_factor,
        status_forcelist=list(RETRY_STATUSES),
        allowed_methods=list(allowed_methods),
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    session.headers.update({
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
        "Content-Type": "application/json",
    })

    logger.debug("Created HTTP session (retries=%d, backoff=%.2f)", max_retries, backoff_factor)
    return session
