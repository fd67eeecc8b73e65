from __future__ import annotations

from pyvstore._redact import redact_for_log, redact_url


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "success": True,
        "data": {"token": "T1", "user": {"id": "u1", "gameName": "Foo"}},
        "headers": {"Authorization": "Bearer T1", "content-type": "application/json"},
        "json": {"callbackUrl": "https://host/opt_in#access_token=AAA"},
        "access_token": "AAA",
        "idToken": "BBB",
    }

    redacted = redact_for_log(payload)
    assert redacted["data"]["token"] == "<redacted>"
    assert redacted["data"]["user"]["gameName"] == "Foo"
    assert redacted["headers"]["Authorization"] == "<redacted>"
    assert redacted["headers"]["content-type"] == "application/json"
    assert redacted["json"]["callbackUrl"] == "<redacted>"
    assert redacted["access_token"] == "<redacted>"
    assert redacted["idToken"] == "<redacted>"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_url_drops_fragment_and_query() -> None:
    assert redact_url("https://host/opt_in#access_token=AAA&id_token=BBB") == "https://host/opt_in#<redacted>"
    assert redact_url("https://host/opt_in?access_token=AAA") == "https://host/opt_in#<redacted>"
    assert redact_url("https://host/opt_in") == "https://host/opt_in"
