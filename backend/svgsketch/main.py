"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from svgsketch.config import settings
from svgsketch.engine.registry import load_handlers

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.svgsketch_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(
        title="svgsketch",
        description="SVG to hand-sketched rendition — semantic interpretation of SVG drawings",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Import all handler modules to trigger registration
    load_handlers()

    from svgsketch.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()
