"""
Identity Call Models
====================
Result handed from the outbound-call worker to the request flow.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DelegatedCallResult:
    """Outcome of one identity-service round-trip. Produced and read once."""
    error: Optional[BaseException] = None
    status_code: int = 0
    payload: bytes = b""

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code == 200
