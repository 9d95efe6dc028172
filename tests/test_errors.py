from http import HTTPStatus

import pytest

from pluginhub.errors import (
    PLAIN_TEXT,
    AuthError,
    ExpiredError,
    InternalError,
    NotFoundError,
    RouterError,
    UsedError,
)


@pytest.mark.parametrize(
    "error_type, status",
    [
        (AuthError, HTTPStatus.UNAUTHORIZED),
        (NotFoundError, HTTPStatus.NOT_FOUND),
        (ExpiredError, HTTPStatus.GONE),
        (UsedError, HTTPStatus.GONE),
    ],
)
def test_status_and_body(error_type, status):
    error = error_type("Verification Code not found")
    response = error.response()
    assert response.status == status
    assert response.body == "Verification Code not found"
    assert response.content_type == PLAIN_TEXT


def test_message_is_string_form():
    assert str(ExpiredError("This Verification code is expired")) == (
        "This Verification code is expired"
    )


def test_internal_error():
    error = InternalError()
    assert str(error) == "InternalError"
    assert error.response().status == HTTPStatus.INTERNAL_SERVER_ERROR
    assert error.response().body == "InternalError"


def test_errors_are_router_errors():
    message = "Verification is already sended please wait and try again"
    error = UsedError(message)
    assert isinstance(error, RouterError)
    assert error.status_code == HTTPStatus.GONE
    response = error.response()
    assert response.status == HTTPStatus.GONE
    assert response.body == message