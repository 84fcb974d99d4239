from po_upload.auth.models import GuardDecision, RequestContext

PASS = GuardDecision()


def _under(path: str, prefix: str) -> bool:
    return path.startswith(prefix)


class SessionGuard:
    """Path-based gate in front of the upload flow.

    Signed-out users are sent from the upload flow to sign-in; signed-in users
    are sent from sign-in to the upload flow. Everything else passes.
    """

    def __init__(self, *, upload_path: str = "/upload", sign_in_path: str = "/auth") -> None:
        self.upload_path = upload_path
        self.sign_in_path = sign_in_path

    def guards(self, path: str) -> bool:
        """Whether a navigation to ``path`` needs a session lookup at all."""
        return _under(path, self.upload_path) or _under(path, self.sign_in_path)

    def evaluate(self, context: RequestContext) -> GuardDecision:
        if _under(context.path, self.upload_path) and context.session is None:
            return GuardDecision(redirect_to=self.sign_in_path)
        if _under(context.path, self.sign_in_path) and context.session is not None:
            return GuardDecision(redirect_to=self.upload_path)
        return PASS
