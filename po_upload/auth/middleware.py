from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from po_upload.auth.exceptions import IdentityError
from po_upload.auth.guard import SessionGuard
from po_upload.auth.identity import SupabaseIdentityProvider
from po_upload.auth.models import RequestContext, Session
from po_upload.logging.logger import Log

_NAVIGATION_METHODS = frozenset({"GET", "HEAD"})


class SessionGuardMiddleware(BaseHTTPMiddleware):
    """Applies SessionGuard to page navigations. API routes are never redirected."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        guard: SessionGuard,
        identity: SupabaseIdentityProvider,
        cookie_name: str,
    ) -> None:
        super().__init__(app)
        self._guard = guard
        self._identity = identity
        self._cookie_name = cookie_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if (
            request.method not in _NAVIGATION_METHODS
            or path.startswith("/api")
            or not self._guard.guards(path)
        ):
            return await call_next(request)

        session = await run_in_threadpool(
            self._resolve_session, request.cookies.get(self._cookie_name)
        )
        decision = self._guard.evaluate(RequestContext(path=path, session=session))
        if not decision.allowed:
            Log.debug(f"Guard redirect {path} -> {decision.redirect_to}")
            return RedirectResponse(url=decision.redirect_to, status_code=307)
        request.state.session = session
        return await call_next(request)

    def _resolve_session(self, access_token: str | None) -> Session | None:
        try:
            return self._identity.get_session(access_token)
        except IdentityError as exc:
            Log.warning(f"Session lookup failed, treating request as signed out: {exc}")
            return None
