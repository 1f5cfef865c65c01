"""
Thin wrapper over the Cognito user pool that owns organizer sessions.

Listeners registered with on_auth_state_change are told about every
sign-up, sign-in and sign-out performed through this module.
"""
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from . import config
from .exceptions import BackendError

logger = logging.getLogger(__name__)

cognito_client = boto3.client(
    "cognito-idp",
    aws_access_key_id=config.AWS_ACCESS_KEY,
    aws_secret_access_key=config.AWS_SECRET_KEY,
    region_name=config.AWS_REGION,
)

SIGNED_UP = "SIGNED_UP"
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

# Errors that mean "bad credentials / bad token" rather than a broken backend
AUTH_REJECTIONS = {
    "NotAuthorizedException",
    "UserNotFoundException",
    "UserNotConfirmedException",
    "UsernameExistsException",
    "InvalidPasswordException",
    "InvalidParameterException",
}

_listeners = []


class AuthRejected(Exception):
    """The auth provider refused the credentials or token."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


def on_auth_state_change(callback):
    """
    Subscribe to auth state changes.

    Args:
        callback: Called as callback(event, session) on every change.

    Returns:
        A function that removes the subscription.
    """
    _listeners.append(callback)

    def unsubscribe():
        if callback in _listeners:
            _listeners.remove(callback)

    return unsubscribe


def _notify(event: str, session: dict):
    for callback in list(_listeners):
        try:
            callback(event, session)
        except Exception:
            logger.exception("Auth listener failed on %s", event)


def _call(operation: str, **kwargs) -> dict:
    try:
        return getattr(cognito_client, operation)(**kwargs)
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code", "")
        if code in AUTH_REJECTIONS:
            raise AuthRejected(code, e.response.get("Error", {}).get("Message", code)) from e
        raise BackendError(f"Cognito {operation} failed: {str(e)}") from e
    except BotoCoreError as e:
        raise BackendError(f"Cognito {operation} failed: {str(e)}") from e


def sign_up(email: str, password: str) -> dict:
    response = _call(
        "sign_up",
        ClientId=config.COGNITO_CLIENT_ID,
        Username=email,
        Password=password,
        UserAttributes=[{"Name": "email", "Value": email}],
    )
    user = {"id": response.get("UserSub"), "email": email,
            "confirmed": bool(response.get("UserConfirmed"))}
    _notify(SIGNED_UP, {"user": user})
    return user


def sign_in(email: str, password: str) -> dict:
    """
    Sign an organizer in with email and password.

    Returns:
        dict: access/id/refresh tokens, expiry and the user identity.
    """
    response = _call(
        "initiate_auth",
        ClientId=config.COGNITO_CLIENT_ID,
        AuthFlow="USER_PASSWORD_AUTH",
        AuthParameters={"USERNAME": email, "PASSWORD": password},
    )
    result = response.get("AuthenticationResult") or {}
    if not result.get("AccessToken"):
        # e.g. a NEW_PASSWORD_REQUIRED challenge, which this app does not handle
        raise AuthRejected(response.get("ChallengeName", "NoSession"), "Sign-in did not return a session")

    session = {
        "access_token": result["AccessToken"],
        "id_token": result.get("IdToken"),
        "refresh_token": result.get("RefreshToken"),
        "expires_in": result.get("ExpiresIn"),
        "token_type": result.get("TokenType", "Bearer"),
    }
    session["user"] = get_user(session["access_token"])
    _notify(SIGNED_IN, session)
    return session


def sign_out(access_token: str):
    _call("global_sign_out", AccessToken=access_token)
    _notify(SIGNED_OUT, {"access_token": access_token})


def get_user(access_token: str) -> dict:
    """
    Resolve the user behind an access token.

    Returns:
        dict: {"id": <sub>, "email": <email>}
    """
    response = _call("get_user", AccessToken=access_token)
    attributes = {a["Name"]: a["Value"] for a in response.get("UserAttributes", [])}
    return {"id": attributes.get("sub") or response.get("Username"), "email": attributes.get("email")}
