import pytest

from src.songsync.core.security import (
    generate_session_id,
    generate_state,
    sanitize_return_url,
)


def test_generated_values_are_unique():
    assert generate_state() != generate_state()
    assert generate_session_id() != generate_session_id()
    assert len(generate_state()) >= 43


@pytest.mark.parametrize(
    "return_to, expected",
    [
        (None, "/"),
        ("", "/"),
        ("/lyrics", "/lyrics"),
        ("  /#/now-playing ", "/#/now-playing"),
        ("//evil.example.com", "/"),
        ("https://evil.example.com/", "/"),
        ("http://localhost:8080/#/", "/"),
        ("/bad\npath", "/"),
    ],
)
def test_sanitize_return_url(return_to, expected):
    assert sanitize_return_url(return_to) == expected

