import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from database import init_db
from vitrine import settings
from vitrine.api_routes import router
from vitrine.whatsapp_webhook import router as whatsapp_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # cria tabelas
    try:
        init_db()
    except Exception as e:
        # não derruba o servidor se o banco estiver fora no boot
        logger.warning("init_db falhou: %s", e)
    yield


app = FastAPI(title="Vitrine WhatsApp", lifespan=lifespan)
app.include_router(router)
app.include_router(whatsapp_router)
