"""Client/appointment directory collaborator and its IntakeQ implementation."""

import logging
from datetime import date
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from voicedesk.schemas.directory import (
    Appointment,
    Client,
    CreateAppointmentRequest,
    Intake,
    Practitioner,
    QuestionnaireTemplate,
    SchedulingSettings,
    SendQuestionnaireRequest,
)

logger = logging.getLogger(__name__)

INTAKEQ_API_URL = "https://intakeq.com/api/v1"


class DirectoryError(Exception):
    """Raised when the directory cannot be reached or answers with garbage."""


class Directory(Protocol):
    async def search_clients(self, query: str) -> list[Client]: ...

    async def get_client_by_email(self, email: str) -> Client | None: ...

    async def list_appointments(
        self, start_date: date, end_date: date, status: str | None = None
    ) -> list[Appointment]: ...

    async def get_appointment(self, appointment_id: str) -> Appointment | None: ...

    async def create_appointment(self, request: CreateAppointmentRequest) -> Appointment: ...

    async def cancel_appointment(self, appointment_id: str, reason: str | None = None) -> None: ...

    async def get_scheduling_settings(self) -> SchedulingSettings: ...

    async def list_questionnaire_templates(self) -> list[QuestionnaireTemplate]: ...

    async def list_questionnaire_practitioners(self) -> list[Practitioner]: ...

    async def send_questionnaire(self, request: SendQuestionnaireRequest) -> Intake: ...


class IntakeQDirectory:
    """Directory backed by the IntakeQ REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = INTAKEQ_API_URL,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"X-Auth-Key": api_key, "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("IntakeQ %s %s failed: %s %s", method, path, exc.response.status_code, exc.response.text)
            raise DirectoryError(f"IntakeQ {method} {path} returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("IntakeQ %s %s failed: %s", method, path, exc)
            raise DirectoryError(f"IntakeQ {method} {path} failed") from exc
        return resp

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        resp = await self._request("GET", path, params=params)
        return resp.json()

    @staticmethod
    def _parse(model, payload: Any):
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise DirectoryError(f"Unexpected {model.__name__} payload from IntakeQ") from exc

    @classmethod
    def _parse_list(cls, model, payload: Any) -> list:
        if not isinstance(payload, list):
            raise DirectoryError(f"Expected a list of {model.__name__} from IntakeQ")
        return [cls._parse(model, item) for item in payload]

    async def search_clients(self, query: str) -> list[Client]:
        data = await self._get_json("/clients", {"search": query, "includeProfile": "true"})
        clients = self._parse_list(Client, data)
        logger.info("Client search '%s' returned %d results", query, len(clients))
        return clients

    async def get_client_by_email(self, email: str) -> Client | None:
        wanted = email.strip().lower()
        for client in await self.search_clients(email):
            if client.email and client.email.strip().lower() == wanted:
                return client
        return None

    async def list_appointments(
        self, start_date: date, end_date: date, status: str | None = None
    ) -> list[Appointment]:
        params = {"startDate": start_date.isoformat(), "endDate": end_date.isoformat()}
        if status:
            params["status"] = status
        data = await self._get_json("/appointments", params)
        return self._parse_list(Appointment, data)

    async def get_appointment(self, appointment_id: str) -> Appointment | None:
        try:
            resp = await self._client.get(f"/appointments/{appointment_id}")
        except httpx.HTTPError as exc:
            raise DirectoryError(f"IntakeQ GET /appointments/{appointment_id} failed") from exc
        if resp.status_code == 404:
            return None
        if resp.status_code >= 400:
            logger.error("IntakeQ appointment lookup error %s: %s", resp.status_code, resp.text)
            raise DirectoryError(f"IntakeQ GET /appointments/{appointment_id} returned {resp.status_code}")
        if not resp.content:
            return None
        return self._parse(Appointment, resp.json())

    async def create_appointment(self, request: CreateAppointmentRequest) -> Appointment:
        resp = await self._request(
            "POST", "/appointments", json=request.model_dump(mode="json", by_alias=True, exclude_none=True)
        )
        appointment = self._parse(Appointment, resp.json())
        logger.info("Appointment created: %s", appointment.id)
        return appointment

    async def cancel_appointment(self, appointment_id: str, reason: str | None = None) -> None:
        body = {"AppointmentId": appointment_id}
        if reason:
            body["Reason"] = reason
        await self._request("POST", "/appointments/cancellation", json=body)
        logger.info("Appointment canceled: %s", appointment_id)

    async def get_scheduling_settings(self) -> SchedulingSettings:
        return self._parse(SchedulingSettings, await self._get_json("/appointments/settings"))

    async def list_questionnaire_templates(self) -> list[QuestionnaireTemplate]:
        return self._parse_list(QuestionnaireTemplate, await self._get_json("/questionnaires"))

    async def list_questionnaire_practitioners(self) -> list[Practitioner]:
        return self._parse_list(Practitioner, await self._get_json("/practitioners"))

    async def send_questionnaire(self, request: SendQuestionnaireRequest) -> Intake:
        resp = await self._request(
            "POST", "/intakes/send", json=request.model_dump(mode="json", by_alias=True, exclude_none=True)
        )
        intake = self._parse(Intake, resp.json())
        logger.info("Questionnaire %s sent: intake %s", request.questionnaire_id, intake.id)
        return intake
