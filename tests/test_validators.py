"""
==============================================================================
Validator and Settings Tests
==============================================================================
"""

import pytest
from pydantic import ValidationError

from smartpass.config import Settings
from smartpass.utils import SeatNumberValidator, SeatRangeValidator


class TestSeatNumberValidator:

    @pytest.mark.parametrize("raw, expected", [
        ("s-42", "S-42"),
        ("  b12 ", "B12"),
        ("7", "7"),
    ])
    def test_normalizes(self, raw, expected):
        assert SeatNumberValidator().validate(raw) == (True, expected, None)

    @pytest.mark.parametrize("raw", [None, "", "   ", "\n\t"])
    def test_blank(self, raw):
        is_valid, normalized, error = SeatNumberValidator().validate(raw)
        assert is_valid is False
        assert normalized is None
        assert error == "QR code did not contain a seat number."

    def test_too_long(self):
        is_valid, _, error = SeatNumberValidator().validate("X" * 21)
        assert is_valid is False
        assert "20" in error


class TestSeatRangeValidator:

    def test_valid_range(self):
        assert SeatRangeValidator(50).validate(1, 51) == (True, None)

    def test_single_seat(self):
        assert SeatRangeValidator(50).validate(5, 5) == (True, None)

    @pytest.mark.parametrize("start, end", [(0, 5), (5, 1), (-1, -1)])
    def test_invalid_numbers(self, start, end):
        assert SeatRangeValidator(50).validate(start, end) == (False, "Please enter valid seat numbers")

    def test_span_limit(self):
        assert SeatRangeValidator(10).validate(1, 12) == (False, "Maximum 10 seats at a time")


class TestSettings:

    def test_blank_url_is_not_configured(self):
        assert Settings(smartpass_api_url="   ").smartpass_api_url is None

    def test_url_is_trimmed(self):
        settings = Settings(smartpass_api_url=" https://script.example.com/exec ")
        assert settings.smartpass_api_url == "https://script.example.com/exec"

    def test_non_http_url_rejected(self):
        with pytest.raises(ValidationError):
            Settings(smartpass_api_url="ftp://example.com")

    def test_short_passcode_rejected(self):
        with pytest.raises(ValidationError):
            Settings(admin_passcode="123")

    def test_unknown_env_falls_back(self):
        assert Settings(app_env="Qa").app_env == "development"

    def test_cors_origins(self):
        assert Settings(cors_origins='["http://kiosk.local"]').cors_origins_list == ["http://kiosk.local"]
        assert Settings(cors_origins="not json").cors_origins_list == ["*"]
