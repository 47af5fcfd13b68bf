from voicedesk.config import Settings, parse_business_days


def test_parse_business_days():
    assert parse_business_days("1,2,3,4,5") == frozenset({1, 2, 3, 4, 5})
    assert parse_business_days(" 0, 6 ,9,x") == frozenset({0, 6})
    assert parse_business_days("") == frozenset({1, 2, 3, 4, 5})


def test_voice_config_from_settings():
    settings = Settings(
        _env_file=None,
        business_hours_start="08:00",
        business_hours_end="12:30",
        business_days="6",
        transfer_phone_number="",
        default_location_id="4",
    )

    config = settings.voice_config()

    assert config.business_hours.start == "08:00"
    assert config.business_hours.end_minutes == 750
    assert config.business_hours.days == frozenset({6})
    assert config.transfer_number is None
    assert config.default_location_id == "4"


def test_every_setting_feeds_the_app():
    assert set(Settings.model_fields) == {
        "intakeq_api_key",
        "intakeq_base_url",
        "default_practitioner_email",
        "default_service_id",
        "default_location_id",
        "business_hours_start",
        "business_hours_end",
        "business_days",
        "transfer_phone_number",
    }
