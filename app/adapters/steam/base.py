from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping

from app.core.errors import UpstreamAppError


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a single upstream JSON request.

    Exactly one of ``payload`` (when ok) or ``error`` (when not ok) is set.
    """

    ok: bool
    payload: Any = None
    error: UpstreamAppError | None = None

    @classmethod
    def success(cls, payload: Any) -> "FetchResult":
        return cls(ok=True, payload=payload)

    @classmethod
    def failure(cls, error: UpstreamAppError) -> "FetchResult":
        return cls(ok=False, error=error)


class AbstractJsonFetcher(ABC):
    """Interface for clients that GET a URL and decode a JSON body."""

    @abstractmethod
    async def fetch_json(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
    ) -> FetchResult:
        """Fetch ``url`` and decode its JSON body.

        Args:
            url: Absolute URL to request.
            params: Optional query parameters.

        Returns:
            FetchResult: ok with the decoded payload, or not ok with an
            UpstreamAppError describing the failure. Implementations must not
            raise for transport, status or decoding failures.
        """
        ...

    async def aclose(self) -> None:
        """Release underlying connections (no-op by default)."""
