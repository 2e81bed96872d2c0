"""Tests for engine exceptions."""

from datetime import date

from training_load.exceptions import (
    ErrorCode,
    InvalidInputError,
    InvalidWindowError,
    ProviderPayloadError,
    TrainingLoadError,
)


class TestExceptions:
    """Tests for error codes and serialization."""

    def test_base_defaults(self):
        error = TrainingLoadError("boom")

        assert error.code == ErrorCode.INTERNAL_ERROR
        assert error.to_dict() == {"error": {"code": "INTERNAL_ERROR", "message": "boom"}}

    def test_invalid_input_field(self):
        error = InvalidInputError("bad seed", field="initial_atl")

        assert error.code == ErrorCode.VALIDATION_ERROR
        assert error.details == {"field": "initial_atl"}

    def test_invalid_window(self):
        error = InvalidWindowError(date(2024, 2, 1), date(2024, 1, 1))

        assert isinstance(error, InvalidInputError)
        assert error.code == ErrorCode.INVALID_WINDOW
        assert error.to_dict()["error"]["details"] == {
            "window_start": "2024-02-01",
            "window_end": "2024-01-01",
        }

    def test_provider_payload(self):
        error = ProviderPayloadError("strava", "activity has no moving_time", details={"id": 7})

        assert str(error) == "strava: activity has no moving_time"
        assert error.details == {"id": 7, "provider": "strava"}
        assert error.code == ErrorCode.PROVIDER_PAYLOAD_INVALID

    def test_repr(self):
        assert repr(TrainingLoadError("x")) == "TrainingLoadError(code=INTERNAL_ERROR, message='x')"
