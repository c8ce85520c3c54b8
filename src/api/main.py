import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.deps import get_rules, get_settings
from src.components.paste import compile_rules
from src.components.textmodel import update_same_as
from src.rules.models import Rules

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def validate_paste_rules(rules: Rules) -> None:
    """Compile every field's paste rules so a bad pattern stops start-up."""
    for key, field_rules in rules.fields.items():
        compiled = compile_rules(field_rules.paste)
        logger.debug("Compiled %d paste rules for %s", len(compiled), key)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = get_rules(settings)
        validate_paste_rules(rules)
    except (FileNotFoundError, ValueError) as e:
        logger.critical("Rules load failed: %s", e)
        sys.exit(1)

    update_same_as(rules.same_as)
    logger.info("Rules loaded from %s", settings.rules_path)

    yield
    # Shutdown cleanup if needed


app = FastAPI(
    title="Wysiwyg Paste Engine API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import editor  # noqa: E402

app.include_router(editor.router, prefix="/api/editor", tags=["Editor"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
