from pydantic_settings import BaseSettings

from voicedesk.schemas.voice import BusinessHours, VoiceConfig


def parse_business_days(raw: str | None) -> frozenset[int]:
    """Parse "1,2,3,4,5" into weekday numbers, dropping anything outside 0-6."""
    if not raw:
        return frozenset({1, 2, 3, 4, 5})
    days = set()
    for part in raw.split(","):
        part = part.strip()
        if part.isdigit() and 0 <= int(part) <= 6:
            days.add(int(part))
    return frozenset(days)


class Settings(BaseSettings):
    # IntakeQ
    intakeq_api_key: str = ""
    intakeq_base_url: str = "https://intakeq.com/api/v1"

    # Scheduling defaults
    default_practitioner_email: str | None = None
    default_service_id: str | None = None
    default_location_id: str | None = None

    # Business hours (days: 0 = Sunday ... 6 = Saturday)
    business_hours_start: str = "09:00"
    business_hours_end: str = "17:00"
    business_days: str = "1,2,3,4,5"

    # Escalation
    transfer_phone_number: str | None = None

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def voice_config(self) -> VoiceConfig:
        return VoiceConfig(
            business_hours=BusinessHours(
                start=self.business_hours_start,
                end=self.business_hours_end,
                days=parse_business_days(self.business_days),
            ),
            default_practitioner_email=self.default_practitioner_email or None,
            default_service_id=self.default_service_id or None,
            default_location_id=self.default_location_id or None,
            transfer_number=self.transfer_phone_number or None,
        )


settings = Settings()
