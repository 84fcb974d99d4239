"""Sign-in, sign-out and upload pages.

Markup is kept to the bare forms; the upload workflow itself runs through the
orchestrator (``po-upload process``) against the /api endpoints.
"""

from html import escape

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from po_upload.auth.exceptions import AuthenticationError, IdentityError
from po_upload.auth.identity import SupabaseIdentityProvider
from po_upload.auth.models import Session
from po_upload.config.settings import Settings
from po_upload.logging.logger import Log

_PAGE = """<!DOCTYPE html>
<html>
<head><title>{title}</title></head>
<body>
<h1>PO Upload</h1>
{body}
</body>
</html>"""


def _page(title: str, body: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(_PAGE.format(title=escape(title), body=body), status_code=status_code)


def _sign_in_form(sign_in_path: str, message: str = "") -> str:
    notice = f'<p class="error">{escape(message)}</p>' if message else ""
    return f"""{notice}
<form method="post" action="{sign_in_path}">
  <input type="email" name="email" placeholder="Email" required>
  <input type="password" name="password" placeholder="Password" required>
  <button type="submit">Sign in</button>
</form>
<form method="post" action="{sign_in_path}/sign-up">
  <input type="email" name="email" placeholder="Email" required>
  <input type="password" name="password" placeholder="Password" required>
  <button type="submit">Sign up</button>
</form>"""


def _identity(request: Request) -> SupabaseIdentityProvider:
    return request.app.state.identity


def _signed_in(request: Request, session: Session) -> Response:
    settings = request.app.state.settings
    response = RedirectResponse(url=settings.upload_path, status_code=303)
    response.set_cookie(
        settings.session_cookie_name,
        session.access_token,
        httponly=True,
        samesite="lax",
        secure=settings.app_env != "dev",
    )
    return response


def home(request: Request) -> HTMLResponse:
    settings = request.app.state.settings
    return _page(
        "PO Upload",
        f'<p><a href="{settings.upload_path}">Upload a purchase order</a></p>',
    )


def sign_in_page(request: Request) -> HTMLResponse:
    return _page("Sign in", _sign_in_form(request.app.state.settings.sign_in_path))


def sign_in(request: Request, email: str = Form(...), password: str = Form(...)) -> Response:
    try:
        session = _identity(request).sign_in(email, password)
    except AuthenticationError as exc:
        Log.warning(f"Sign-in rejected for {email}: {exc}")
        return _page(
            "Sign in", _sign_in_form(request.app.state.settings.sign_in_path, str(exc)), 401
        )
    return _signed_in(request, session)


def sign_up(request: Request, email: str = Form(...), password: str = Form(...)) -> Response:
    sign_in_path = request.app.state.settings.sign_in_path
    try:
        session = _identity(request).sign_up(email, password)
    except AuthenticationError as exc:
        return _page("Sign up", _sign_in_form(sign_in_path, str(exc)), 400)
    if session is None:
        return _page(
            "Sign up", _sign_in_form(sign_in_path, "Check your email to confirm the account.")
        )
    return _signed_in(request, session)


def sign_out(request: Request) -> Response:
    settings = request.app.state.settings
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        try:
            _identity(request).sign_out(token)
        except IdentityError as exc:
            Log.warning(f"Sign-out could not reach the identity provider: {exc}")
    response = RedirectResponse(url="/", status_code=303)
    response.delete_cookie(settings.session_cookie_name)
    return response


def upload_page(request: Request) -> HTMLResponse:
    session: Session | None = getattr(request.state, "session", None)
    who = escape(session.email or session.user_id) if session else ""
    return _page(
        "Upload Purchase Order",
        f"""<h2>Upload Purchase Order</h2>
<p>Signed in as {who}</p>
<form method="post" action="/sign-out"><button type="submit">Sign out</button></form>""",
    )


def create_router(settings: Settings) -> APIRouter:
    """Page routes, mounted at the sign-in and upload paths the session guard uses."""
    router = APIRouter()
    router.add_api_route("/", home, methods=["GET"], response_class=HTMLResponse)
    router.add_api_route(
        settings.sign_in_path, sign_in_page, methods=["GET"], response_class=HTMLResponse
    )
    router.add_api_route(settings.sign_in_path, sign_in, methods=["POST"])
    router.add_api_route(f"{settings.sign_in_path}/sign-up", sign_up, methods=["POST"])
    router.add_api_route("/sign-out", sign_out, methods=["POST"])
    router.add_api_route(
        settings.upload_path, upload_page, methods=["GET"], response_class=HTMLResponse
    )
    return router
