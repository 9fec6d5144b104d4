from fastapi import FastAPI

from api.v1.chat import router as chat_router
from app.config import get_settings
from app.core.logging import configure_logging
from app.core.middleware import ConversationContextMiddleware
from chain.chains import chain_name, list_supported_chains


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Wallet Chat Service", version="0.1.0")
    app.add_middleware(ConversationContextMiddleware)
    app.include_router(chat_router, prefix="/v1")

    @app.get("/healthz")
    async def healthz():
        s = get_settings()
        return {
            "ok": True,
            "default_chain_id": s.DEFAULT_CHAIN_ID,
            "supported_chains": [
                {"chain_id": cid, "name": chain_name(cid)} for cid in list_supported_chains()
            ],
            "slippage_configured": bool(s.SLIPPAGE_API_BASE_URL),
        }

    return app


app = create_app()
