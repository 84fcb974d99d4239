from dataclasses import dataclass


@dataclass(frozen=True)
class Session:
    """An identity-provider session. Only the provider decides whether it is valid."""

    user_id: str
    email: str | None
    access_token: str
    refresh_token: str | None = None


@dataclass(frozen=True)
class RequestContext:
    """What the guard needs to know about one navigation."""

    path: str
    session: Session | None = None


@dataclass(frozen=True)
class GuardDecision:
    redirect_to: str | None = None

    @property
    def allowed(self) -> bool:
        return self.redirect_to is None
