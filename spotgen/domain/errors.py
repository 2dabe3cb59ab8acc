"""Domain error types.

Connectors translate third-party exceptions into these so the resolution
engine never depends on a client library's exception hierarchy.
"""


class SpotgenError(Exception):
    """Base class for all spotgen errors."""


class ServiceError(SpotgenError):
    """Network or service-level failure from an external metadata service."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service


class NotFoundError(ServiceError):
    """Requested resource was not found."""


class ResolutionError(SpotgenError):
    """A single entry failed to resolve."""

    def __init__(self, index: int, element: object, cause: BaseException) -> None:
        super().__init__(f"Entry {index} ({element}) failed: {cause}")
        self.index = index
        self.element = element
        self.cause = cause


class BatchResolutionError(SpotgenError):
    """One or more slots of a concurrent batch failed.

    Raised only after every slot has settled; ``failures`` holds one
    ResolutionError per failed slot, in positional order.
    """

    def __init__(self, failures: list[ResolutionError]) -> None:
        indices = ", ".join(str(f.index) for f in failures)
        super().__init__(f"{len(failures)} entries failed to resolve (at {indices})")
        self.failures = failures

    @property
    def first(self) -> ResolutionError:
        return self.failures[0]


class PipelineError(SpotgenError):
    """A playlist pipeline step was run out of sequence."""
