"""Secrets never reach logs or error details."""
from gauge_rewards.observability.redaction import REDACTED, redact_sensitive, redact_url


def test_redact_api_key() -> None:
    data = {"graph_api_key": "0123456789abcdef", "space": "beets-gauges.eth"}
    result = redact_sensitive(data)
    assert result["graph_api_key"] == REDACTED
    assert result["space"] == "beets-gauges.eth"


def test_redact_password_and_secret() -> None:
    data = {"password": "hunter2", "client_secret": "s3cr3t", "username": "admin"}
    result = redact_sensitive(data)
    assert result["password"] == REDACTED
    assert result["client_secret"] == REDACTED
    assert result["username"] == "admin"


def test_token_address_is_not_a_secret() -> None:
    data = {"token_address": "0x2D0E0814E62D80056181F5cd932274405966e4f0", "token": "BEETS"}
    result = redact_sensitive(data)
    assert result["token_address"] == data["token_address"]
    assert result["token"] == "BEETS"


def test_redact_nested_sensitive() -> None:
    data = {"outer": {"inner_api_key": "secret123", "normal": "value"}}
    result = redact_sensitive(data)
    assert result["outer"]["inner_api_key"] == REDACTED
    assert result["outer"]["normal"] == "value"


def test_redact_list_of_sensitive() -> None:
    data = {"requests": [{"api_key": "secret1"}, {"api_key": "secret2"}]}
    result = redact_sensitive(data)
    assert result["requests"][0]["api_key"] == REDACTED
    assert result["requests"][1]["api_key"] == REDACTED


def test_redact_case_insensitive() -> None:
    data = {"API_KEY": "secret", "Private_Key": "secret", "ACCESS_TOKEN": "secret"}
    result = redact_sensitive(data)
    assert result["API_KEY"] == REDACTED
    assert result["Private_Key"] == REDACTED
    assert result["ACCESS_TOKEN"] == REDACTED


def test_gateway_key_is_scrubbed_from_urls() -> None:
    url = "https://gateway.thegraph.com/api/0123456789abcdef/subgraphs/id/3VUpuJv8J7kd"
    assert redact_url(url) == f"https://gateway.thegraph.com/api/{REDACTED}/subgraphs/id/3VUpuJv8J7kd"


def test_gateway_key_is_scrubbed_inside_messages() -> None:
    data = {
        "error": "request to https://gateway.thegraph.com/api/k3y/subgraphs/id/x timed out",
    }
    result = redact_sensitive(data)
    assert "k3y" not in result["error"]


def test_plain_urls_are_untouched() -> None:
    assert redact_url("https://hub.snapshot.org/graphql") == "https://hub.snapshot.org/graphql"
