"""Tests for transcript-to-response dispatch."""

from unittest.mock import patch

import pytest

from factories import TRANSFER_NUMBER, assert_no_mutations, make_appointment, make_client
from voicedesk.services.commands import (
    FALLBACK_MESSAGE,
    GREETING_MESSAGE,
    HELP_MESSAGE,
    TROUBLE_MESSAGE,
)


class TestSmallTalk:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("transcript", ["Hello there", "hi", "Good morning!", "hey, you there?"])
    async def test_greeting(self, processor, transcript):
        response = await processor.process_command(transcript)

        assert response.success is True
        assert response.message == GREETING_MESSAGE

    @pytest.mark.asyncio
    async def test_help(self, processor):
        response = await processor.process_command("What can you do?")

        assert response.success is True
        assert response.message == HELP_MESSAGE

    @pytest.mark.asyncio
    async def test_greeting_needs_a_whole_word(self, processor):
        response = await processor.process_command("this is a test")

        assert response.success is False
        assert response.message == FALLBACK_MESSAGE

    @pytest.mark.asyncio
    async def test_unrecognized(self, processor, directory):
        response = await processor.process_command("What's the weather like?")

        assert response.success is False
        assert response.message == FALLBACK_MESSAGE
        assert directory.method_calls == []


class TestSchedule:
    @pytest.mark.asyncio
    async def test_full_command_books(self, processor, directory):
        directory.search_clients.return_value = [make_client()]
        directory.create_appointment.return_value = make_appointment("apt-9")

        response = await processor.process_command("Schedule John Smith for tomorrow at 3 PM")

        assert response.success is True
        directory.search_clients.assert_awaited_once_with("John Smith")
        directory.create_appointment.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_asks_for_name(self, processor, directory):
        response = await processor.process_command("I need to schedule an appointment")

        assert response.success is False
        assert response.message == "I'd be happy to schedule an appointment. What's the client's name?"
        assert response.data["failure"] == "validation_gap"
        directory.search_clients.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_asks_for_time(self, processor, directory):
        response = await processor.process_command("Schedule John Smith")

        assert response.message == "When would you like to schedule the appointment for John Smith?"
        directory.search_clients.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_month_day_in_the_past_rolls_to_next_year(self, processor, directory):
        directory.search_clients.return_value = [make_client()]
        directory.create_appointment.return_value = make_appointment("apt-9")

        response = await processor.process_command("Schedule John Smith on January 5th at 10 AM")

        assert response.success is True
        assert "January 5, 2027" in response.message

    @pytest.mark.asyncio
    async def test_earlier_today_asks_again(self, processor, directory):
        directory.search_clients.return_value = [make_client()]

        response = await processor.process_command("Schedule John Smith for today at 9 AM")

        assert response.success is False
        assert "has already passed" in response.message
        assert_no_mutations(directory)

    @pytest.mark.asyncio
    async def test_ambiguous_client_is_not_booked(self, processor, directory):
        directory.search_clients.return_value = [make_client(1, "John Smith"), make_client(2, "John Smithe")]

        response = await processor.process_command("Schedule John Smith for tomorrow at 3 PM")

        assert response.success is False
        assert len(response.data["matches"]) == 2
        assert_no_mutations(directory)


class TestCancel:
    @pytest.mark.asyncio
    async def test_by_id(self, processor, directory):
        directory.get_appointment.return_value = make_appointment("12345")

        response = await processor.process_command("Cancel appointment 12345")

        assert response.success is True
        directory.cancel_appointment.assert_awaited_once_with("12345", None)

    @pytest.mark.asyncio
    async def test_without_details(self, processor, directory):
        response = await processor.process_command("cancel it")

        assert response.success is False
        assert response.message.startswith("Which appointment would you like to cancel?")
        assert response.transfer_number is None
        assert_no_mutations(directory)

    @pytest.mark.asyncio
    async def test_name_only_offers_transfer(self, processor, directory):
        response = await processor.process_command("Cancel the appointment for Mary Jones tomorrow at 10 am")

        assert response.success is False
        assert response.transfer_number == TRANSFER_NUMBER
        assert "appointment ID" in response.message
        assert_no_mutations(directory)

    @pytest.mark.asyncio
    async def test_time_after_appointment_is_not_an_id(self, processor, directory):
        response = await processor.process_command("Cancel the appointment 10am tomorrow for John Smith")

        assert response.success is False
        assert response.transfer_number == TRANSFER_NUMBER
        assert "appointment ID" in response.message
        directory.get_appointment.assert_not_awaited()
        assert_no_mutations(directory)


class TestTransfers:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "transcript",
        ["Move my appointment to Friday", "Check intake status for Jane", "Is anyone available Friday?"],
    )
    async def test_hands_off_to_staff(self, processor, directory, transcript):
        response = await processor.process_command(transcript)

        assert response.success is False
        assert response.transfer_number == TRANSFER_NUMBER
        assert response.data["failure"] == "out_of_policy"
        assert directory.method_calls == []


class TestClientLookup:
    @pytest.mark.asyncio
    async def test_find_by_name(self, processor, directory):
        directory.search_clients.return_value = [make_client()]

        response = await processor.process_command("Find client John Smith")

        assert response.success is True
        directory.search_clients.assert_awaited_once_with("John Smith")

    @pytest.mark.asyncio
    async def test_email_preferred_over_name(self, processor, directory):
        directory.get_client_by_email.return_value = make_client()

        await processor.process_command("Look up John Smith at john@example.com")

        directory.get_client_by_email.assert_awaited_once_with("john@example.com")
        directory.search_clients.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_find_asks_for_details(self, processor):
        response = await processor.process_command("find someone for me")

        assert response.message == "I'd be happy to find a client for you. What's their name or email address?"

    @pytest.mark.asyncio
    async def test_client_info(self, processor, directory):
        directory.search_clients.return_value = [make_client()]

        response = await processor.process_command("Tell me about John Smith")

        assert response.success is True
        assert response.message.startswith("Found John Smith.")


class TestScheduleListing:
    @pytest.mark.asyncio
    async def test_defaults_to_today(self, processor):
        response = await processor.process_command("Check appointments")

        assert response.success is True
        assert response.message == "There are no confirmed appointments scheduled for today."
        assert response.data["appointments"] == []

    @pytest.mark.asyncio
    async def test_tomorrow(self, processor):
        response = await processor.process_command("What appointments do we have tomorrow?")

        assert response.message == "There are no confirmed appointments scheduled for tomorrow."


class TestIntakeForms:
    @pytest.mark.asyncio
    async def test_sends(self, processor, directory):
        directory.get_client_by_email.return_value = make_client()

        response = await processor.process_command("Send intake form to john@example.com")

        assert response.success is True
        directory.send_questionnaire.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_asks_for_email(self, processor, directory):
        response = await processor.process_command("Send intake form to John Smith")

        assert response.message == "I'd be happy to send an intake form. What's the client's email address?"
        assert_no_mutations(directory)


class TestFailures:
    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_apology(self, processor):
        with patch("voicedesk.services.commands.extract_intent", side_effect=RuntimeError("boom")):
            response = await processor.process_command("Schedule John Smith")

        assert response.success is False
        assert response.message == TROUBLE_MESSAGE
        assert response.transfer_number == TRANSFER_NUMBER
        assert response.data["failure"] == "collaborator_failure"

    @pytest.mark.asyncio
    async def test_reconfigure_returns_new_processor(self, processor):
        updated = processor.reconfigure(transfer_number=None)

        assert updated is not processor
        assert updated.assistant.config.transfer_number is None
        assert processor.assistant.config.transfer_number == TRANSFER_NUMBER

        with patch("voicedesk.services.commands.extract_intent", side_effect=RuntimeError("boom")):
            response = await updated.process_command("hello")
        assert response.transfer_number is None
