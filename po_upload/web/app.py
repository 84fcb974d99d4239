from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from po_upload.auth.guard import SessionGuard
from po_upload.auth.identity import SupabaseIdentityProvider
from po_upload.auth.middleware import SessionGuardMiddleware
from po_upload.config.settings import Settings
from po_upload.extraction.base import BasePurchaseOrderExtractor
from po_upload.proxy import routes as proxy_routes
from po_upload.proxy.forwarder import ProviderForwarder
from po_upload.proxy.mistral import MistralOcrProxy
from po_upload.web import pages


def create_app(
    settings: Settings | None = None,
    *,
    provider_transport: httpx.BaseTransport | None = None,
    identity_transport: httpx.BaseTransport | None = None,
    extractor: BasePurchaseOrderExtractor | None = None,
) -> FastAPI:
    """Build the web app: credential proxy under /api plus the guarded pages.

    Transports and the extractor can be injected so tests never leave the process.
    """
    settings = settings or Settings()
    forwarder = ProviderForwarder(
        base_url=settings.mistral_base_url,
        api_key=settings.mistral_api_key,
        timeout_seconds=settings.provider_timeout_seconds,
        transport=provider_transport,
    )
    identity = SupabaseIdentityProvider(
        supabase_url=settings.supabase_url,
        anon_key=settings.supabase_anon_key,
        transport=identity_transport,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        forwarder.close()
        identity.close()

    app = FastAPI(title="PO Upload", lifespan=lifespan)

    app.state.settings = settings
    app.state.ocr_proxy = MistralOcrProxy(
        forwarder,
        model=settings.mistral_ocr_model,
        include_image_base64=settings.mistral_include_image_base64,
    )
    app.state.extractor = extractor
    app.state.identity = identity

    app.include_router(proxy_routes.router)
    app.include_router(pages.create_router(settings))
    proxy_routes.install_error_handlers(app)
    app.add_middleware(
        SessionGuardMiddleware,
        guard=SessionGuard(upload_path=settings.upload_path, sign_in_path=settings.sign_in_path),
        identity=identity,
        cookie_name=settings.session_cookie_name,
    )

    return app
