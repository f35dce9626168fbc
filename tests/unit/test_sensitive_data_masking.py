import pytest

from config.settings import mask_sensitive_data

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_cpf_masked(self):
        event_dict = {"event": "test", "cpf": "123.456.789-00"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "123.456.789-00" not in result["cpf"]
        assert "***MASKED***" in result["cpf"]

    def test_cnpj_masked(self):
        event_dict = {"event": "client.saved", "cnpj": "11.222.333/0001-81"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "11.222.333/0001-81" not in result["cnpj"]
        assert "***MASKED***" in result["cnpj"]

    def test_smtp_password_masked(self):
        event_dict = {"event": "test", "data": "smtp_password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]

    def test_bearer_token_masked(self):
        event_dict = {"event": "whatsapp", "header": "Bearer wa-abc.123"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "wa-abc.123" not in result["header"]

    def test_api_key_masked(self):
        event_dict = {"event": "mailersend", "detail": "api_key=mlsn.xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "mlsn.xyz" not in result["detail"]
        assert "***MASKED***" in result["detail"]

    def test_non_sensitive_data_unchanged(self):
        event_dict = {"event": "service_order.created", "order_number": "OS-001"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["order_number"] == "OS-001"
        assert result["event"] == "service_order.created"
