"""Exception taxonomy for the ingestion and recommendation pipeline."""


class JobsForceError(Exception):
    """Base class for all jobsforce errors."""


class UpstreamError(JobsForceError):
    """Talking to the ML scoring service failed."""


class UpstreamUnavailable(UpstreamError):
    """Network failure or non-2xx response from the ML service."""


class UpstreamTimeout(UpstreamUnavailable):
    """The ML service did not answer within the configured timeout."""


class UpstreamMalformed(UpstreamError):
    """The ML service answered, but without a usable jobs collection."""


class StoreError(JobsForceError):
    """A listing could not be written to the store."""


class DuplicateKeyConflict(StoreError):
    """Insert lost a race on the unique (source, source_id) key."""

    def __init__(self, source: str, source_id: str):
        super().__init__(f"Listing already exists for {source}/{source_id}")
        self.source = source
        self.source_id = source_id


class ValidationError(StoreError):
    """Listing is missing required fields or carries invalid values."""

    def __init__(self, problems: list[str]):
        super().__init__("; ".join(problems))
        self.problems = problems
