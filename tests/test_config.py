import pytest

from extended_future import ExtendedFuture, Settings, get_settings


def test_defaults():
    settings = get_settings()

    assert isinstance(settings, Settings)
    assert settings.SUPPRESS_UNHANDLED_REJECTIONS is False
    assert settings.LOG_LEVEL == "WARNING"


def test_settings_are_cached():
    assert get_settings() is get_settings()


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("EXTENDED_FUTURE_SUPPRESS_UNHANDLED_REJECTIONS", "1")
    monkeypatch.setenv("EXTENDED_FUTURE_LOG_LEVEL", "debug")
    get_settings.cache_clear()

    settings = get_settings()
    assert settings.SUPPRESS_UNHANDLED_REJECTIONS is True
    assert settings.LOG_LEVEL == "debug"


@pytest.mark.asyncio
async def test_no_suppression_by_default(recording_implementation):
    ExtendedFuture()

    assert "catch" not in recording_implementation.calls


@pytest.mark.asyncio
async def test_process_default_turns_suppression_on(recording_implementation):
    get_settings().SUPPRESS_UNHANDLED_REJECTIONS = True

    ExtendedFuture()

    assert recording_implementation.calls == ["create", "catch"]


@pytest.mark.asyncio
async def test_instance_option_beats_process_default(recording_implementation):
    get_settings().SUPPRESS_UNHANDLED_REJECTIONS = True
    ExtendedFuture(suppress_unhandled_rejections=False)
    assert "catch" not in recording_implementation.calls

    get_settings().SUPPRESS_UNHANDLED_REJECTIONS = False
    ExtendedFuture(suppress_unhandled_rejections=True)
    assert recording_implementation.calls.count("catch") == 1


@pytest.mark.asyncio
async def test_suppression_does_not_change_delivered_error():
    cell = ExtendedFuture(suppress_unhandled_rejections=True)
    error = ValueError("still delivered")
    cell.reject(error)

    with pytest.raises(ValueError) as info:
        await cell
    assert info.value is error


@pytest.mark.asyncio
async def test_executor_mode_never_suppresses(recording_implementation):
    get_settings().SUPPRESS_UNHANDLED_REJECTIONS = True

    ExtendedFuture(lambda ok, fail: ok(1))

    assert recording_implementation.calls == ["create"]
