import pytest

from conftest import client_error
from inviteme import cognito_service
from inviteme.cognito_service import SIGNED_IN, SIGNED_OUT, SIGNED_UP, AuthRejected
from inviteme.exceptions import BackendError


@pytest.fixture
def events():
    received = []
    unsubscribe = cognito_service.on_auth_state_change(lambda event, session: received.append((event, session)))
    yield received
    unsubscribe()


def test_sign_up_notifies_listeners(cognito, events):
    user = cognito_service.sign_up("org@example.com", "Secret123!")

    assert user == {"id": "sub-1", "email": "org@example.com", "confirmed": False}
    assert events == [(SIGNED_UP, {"user": user})]


def test_duplicate_sign_up_is_rejected(cognito):
    cognito.add_user("org@example.com", "pw", "sub-9")
    with pytest.raises(AuthRejected) as exc_info:
        cognito_service.sign_up("org@example.com", "pw")
    assert exc_info.value.code == "UsernameExistsException"


def test_sign_in_returns_session(cognito, events):
    cognito.add_user("org@example.com", "pw", "sub-7")

    session = cognito_service.sign_in("org@example.com", "pw")

    assert session["access_token"] == "token-sub-7"
    assert session["user"] == {"id": "sub-7", "email": "org@example.com"}
    assert events[-1][0] == SIGNED_IN


def test_sign_in_with_wrong_password(cognito):
    cognito.add_user("org@example.com", "pw", "sub-7")
    with pytest.raises(AuthRejected):
        cognito_service.sign_in("org@example.com", "wrong")


def test_sign_out(cognito, events):
    cognito.add_user("org@example.com", "pw", "sub-7")
    session = cognito_service.sign_in("org@example.com", "pw")

    cognito_service.sign_out(session["access_token"])

    assert cognito.signed_out == ["org@example.com"]
    assert events[-1] == (SIGNED_OUT, {"access_token": session["access_token"]})


def test_unsubscribed_listener_is_not_called(cognito):
    received = []
    unsubscribe = cognito_service.on_auth_state_change(lambda event, session: received.append(event))
    unsubscribe()

    cognito_service.sign_up("org@example.com", "pw")

    assert received == []


def test_failing_listener_does_not_break_sign_up(cognito):
    def broken(event, session):
        raise RuntimeError("boom")

    unsubscribe = cognito_service.on_auth_state_change(broken)
    try:
        assert cognito_service.sign_up("org@example.com", "pw")["email"] == "org@example.com"
    finally:
        unsubscribe()


def test_unexpected_errors_become_backend_errors(monkeypatch, cognito):
    def unavailable(**kwargs):
        raise client_error("InternalErrorException", "GetUser")

    monkeypatch.setattr(cognito, "get_user", unavailable)
    with pytest.raises(BackendError):
        cognito_service.get_user("token")
