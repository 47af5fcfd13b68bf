"""Voice platform webhooks.

Bland.ai posts each caller utterance here and speaks back the returned
message. The route only adapts payloads; all decisions are made by the
CommandProcessor.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from voicedesk.schemas.voice import (
    BlandWebhookRequest,
    BlandWebhookResponse,
    CommandTestRequest,
)
from voicedesk.services.commands import TROUBLE_MESSAGE, CommandProcessor

logger = logging.getLogger(__name__)

router = APIRouter(tags=["voice"])


def get_processor(request: Request) -> CommandProcessor:
    return request.app.state.processor


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.post("/bland-webhook")
async def bland_webhook(req: BlandWebhookRequest, processor: CommandProcessor = Depends(get_processor)):
    """Run one caller utterance through the command processor."""
    logger.info(
        "bland_webhook: call=%s from=%s to=%s transcript=%r",
        req.call_id, req.from_number, req.to_number, req.transcript,
    )

    if not req.transcript:
        logger.error("Missing transcript in webhook request")
        return JSONResponse(
            status_code=400,
            content=BlandWebhookResponse(
                message="I didn't catch that. Could you please repeat what you need help with?",
            ).model_dump(),
        )

    if not req.call_id:
        logger.error("Missing call_id in webhook request")
        return JSONResponse(
            status_code=400,
            content=BlandWebhookResponse(
                message="I'm experiencing technical difficulties. Please try calling again.",
                end_call=True,
            ).model_dump(),
        )

    try:
        voice = await processor.process_command(req.transcript)
    except Exception as exc:
        logger.exception("Error processing voice command for call %s", req.call_id)
        return JSONResponse(
            status_code=500,
            content=BlandWebhookResponse(
                message=TROUBLE_MESSAGE,
                transfer_number=processor.assistant.config.transfer_number,
                data={
                    "success": False,
                    "call_id": req.call_id,
                    "error": str(exc),
                    "timestamp": _now_iso(),
                },
            ).model_dump(),
        )

    resp = BlandWebhookResponse(
        message=voice.message,
        end_call=voice.end_call,
        transfer_number=voice.transfer_number,
        data={
            "success": voice.success,
            "call_id": req.call_id,
            "original_transcript": req.transcript,
            "response_data": voice.data,
            "timestamp": _now_iso(),
        },
    )
    logger.info(
        "bland_webhook reply: call=%s success=%s length=%d end_call=%s transfer=%s",
        req.call_id, voice.success, len(resp.message), resp.end_call, bool(resp.transfer_number),
    )
    return resp


@router.post("/test-command")
async def test_command(req: CommandTestRequest, processor: CommandProcessor = Depends(get_processor)):
    """Development helper: run a bare transcript and echo the full VoiceResponse."""
    if not req.transcript:
        return JSONResponse(status_code=400, content={"error": "Missing transcript"})

    voice = await processor.process_command(req.transcript)
    return {"transcript": req.transcript, "response": voice.model_dump(), "timestamp": _now_iso()}


@router.get("/config")
async def voice_config(processor: CommandProcessor = Depends(get_processor)):
    config = processor.assistant.config
    hours = config.business_hours
    return {
        "business_hours": {"start": hours.start, "end": hours.end, "days": sorted(hours.days)},
        "has_transfer_number": bool(config.transfer_number),
        "has_default_practitioner": bool(config.default_practitioner_email),
        "has_default_service": bool(config.default_service_id),
    }
