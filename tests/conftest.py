"""
Shared pytest fixtures.

The directory collaborator is an AsyncMock shaped like IntakeQDirectory, so
tests can both script its answers and assert which calls were (not) made.
"""

from unittest.mock import AsyncMock

import pytest

from factories import NOW, TRANSFER_NUMBER, make_questionnaires, make_settings
from voicedesk.schemas.directory import Intake
from voicedesk.schemas.voice import VoiceConfig
from voicedesk.services.commands import CommandProcessor
from voicedesk.services.directory import IntakeQDirectory
from voicedesk.services.workflows import VoiceAssistant


@pytest.fixture
def directory() -> AsyncMock:
    """Directory fake with empty-but-valid default answers."""
    mock = AsyncMock(spec=IntakeQDirectory)
    mock.search_clients.return_value = []
    mock.get_client_by_email.return_value = None
    mock.list_appointments.return_value = []
    mock.get_appointment.return_value = None
    mock.get_scheduling_settings.return_value = make_settings()
    mock.list_questionnaire_templates.return_value = make_questionnaires()
    mock.list_questionnaire_practitioners.return_value = make_settings().practitioners
    mock.send_questionnaire.return_value = Intake(id="intake-1")
    return mock


@pytest.fixture
def config() -> VoiceConfig:
    return VoiceConfig(transfer_number=TRANSFER_NUMBER)


@pytest.fixture
def assistant(directory, config) -> VoiceAssistant:
    return VoiceAssistant(directory, config, clock=lambda: NOW)


@pytest.fixture
def processor(assistant) -> CommandProcessor:
    return CommandProcessor(assistant)
