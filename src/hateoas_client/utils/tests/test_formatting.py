import pytest


@pytest.fixture
def target():
    from ..formatting import english_enumerate

    return english_enumerate


@pytest.mark.parametrize(
    ("items", "expected"),
    [
        ([], ""),
        (["url"], "url"),
        (["url", "method"], "url, and method"),
        (["url", "method", "body"], "url, method, and body"),
    ],
)
def test_english_enumerate(target, items, expected):
    assert target(items) == expected


def test_conjunction(target):
    assert target(iter(["GET", "POST", "PUT", "PATCH"]), " or ") == "GET, POST, PUT or PATCH"


def test_messages():
    from ...exceptions import UnsupportedMethodError, ValidationError

    assert str(ValidationError(["id"])) == (
        "passed param id must not be null, undefined or empty"
    )
    assert str(ValidationError(["url", "method"])) == (
        "passed params url, and method must not be null, undefined or empty"
    )
    assert str(UnsupportedMethodError("DELETE", ["GET", "POST"])) == (
        "allowed only GET or POST http methods, you passed DELETE"
    )
