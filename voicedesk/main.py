import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI

logging.basicConfig(level=logging.INFO)

from voicedesk.api.webhook import router as webhook_router
from voicedesk.config import settings
from voicedesk.services.commands import CommandProcessor
from voicedesk.services.directory import IntakeQDirectory
from voicedesk.services.workflows import VoiceAssistant

VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def create_app(processor: CommandProcessor | None = None) -> FastAPI:
    """Build the webhook app. Without a processor one is wired to IntakeQ from settings."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        directory = None
        if processor is None:
            if not settings.intakeq_api_key:
                logger.warning("INTAKEQ_API_KEY is not set; directory calls will be rejected")
            directory = IntakeQDirectory(settings.intakeq_api_key, settings.intakeq_base_url)
            config = settings.voice_config()
            app.state.processor = CommandProcessor(VoiceAssistant(directory, config))
            logger.info(
                "Business hours %s-%s on days %s, transfer number %s",
                config.business_hours.start, config.business_hours.end,
                sorted(config.business_hours.days), "set" if config.transfer_number else "not set",
            )
        yield
        if directory is not None:
            await directory.aclose()

    app = FastAPI(title="Voicedesk", version=VERSION, lifespan=lifespan)
    if processor is not None:
        app.state.processor = processor

    app.include_router(webhook_router)

    @app.get("/health")
    async def health():
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat(), "version": VERSION}

    return app


app = create_app()
