from dataclasses import dataclass


@dataclass(frozen=True)
class ProxyResponse:
    """Status and JSON body to relay back to the caller unchanged."""

    status_code: int
    body: object

    @property
    def ok(self) -> bool:
        return self.status_code < 400
