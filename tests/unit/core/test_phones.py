import pytest

from modules.core.phones import format_phone_for_display, sanitize_phone

pytestmark = pytest.mark.unit


class TestSanitizePhone:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("(11) 98765-4321", "5511987654321"),
            ("34 99999-0000", "5534999990000"),
            ("+55 (11) 98765-4321", "5511987654321"),
            ("21987654321", "5521987654321"),
            ("9876-5432", "98765432"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_sanitize(self, raw, expected):
        assert sanitize_phone(raw) == expected

    def test_already_sanitized_is_stable(self):
        assert sanitize_phone(sanitize_phone("(11) 98765-4321")) == "5511987654321"


class TestFormatPhoneForDisplay:
    def test_full_number(self):
        assert format_phone_for_display("5511987654321") == "+55 (11) 98765-4321"

    def test_local_number(self):
        assert format_phone_for_display("11987654321") == "(11) 98765-4321"

    def test_empty(self):
        assert format_phone_for_display("") == "N/A"

    def test_unrecognised_is_returned_unchanged(self):
        assert format_phone_for_display("ramal 204") == "ramal 204"
