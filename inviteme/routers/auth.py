import logging

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordBearer

from .. import cognito_service
from ..cognito_service import AuthRejected
from ..exceptions import BackendError
from ..models import Credentials, CurrentUser, SignUpRequest

logger = logging.getLogger(__name__)

router = APIRouter()

PASSWORDS_DO_NOT_MATCH = "הסיסמאות אינן תואמות"
SIGN_UP_SUCCESS = "נרשמת בהצלחה!"
SIGN_IN_FAILED = "אימייל או סיסמה שגויים"
AUTH_UNAVAILABLE = "שירות ההתחברות אינו זמין כעת"

# Extract the access token from the Authorization header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/sign-in")


def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """
    Validates the access token sent by the UI and resolves the organizer.
    """
    try:
        user = cognito_service.get_user(token)
    except AuthRejected:
        raise HTTPException(status_code=401, detail="Could not validate credentials",
                            headers={"WWW-Authenticate": "Bearer"})
    except BackendError:
        logger.exception("Token validation failed")
        raise HTTPException(status_code=503, detail=AUTH_UNAVAILABLE)
    return CurrentUser(**user)


@router.post("/sign-up")
def sign_up(data: SignUpRequest):
    """
    Registers an organizer. The user pool sends the verification email.
    """
    if data.password != data.password_confirm:
        raise HTTPException(status_code=400, detail={"message": PASSWORDS_DO_NOT_MATCH,
                                                     "fields": ["password_confirm"]})
    try:
        user = cognito_service.sign_up(data.email, data.password)
    except AuthRejected as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BackendError:
        logger.exception("Sign-up failed for %s", data.email)
        raise HTTPException(status_code=503, detail=AUTH_UNAVAILABLE)
    return {"message": SIGN_UP_SUCCESS, "user": user}


@router.post("/sign-in")
def sign_in(data: Credentials):
    try:
        return cognito_service.sign_in(data.email, data.password)
    except AuthRejected:
        raise HTTPException(status_code=401, detail=SIGN_IN_FAILED)
    except BackendError:
        logger.exception("Sign-in failed for %s", data.email)
        raise HTTPException(status_code=503, detail=AUTH_UNAVAILABLE)


@router.post("/sign-out")
def sign_out(token: str = Depends(oauth2_scheme)):
    try:
        cognito_service.sign_out(token)
    except AuthRejected:
        raise HTTPException(status_code=401, detail="Could not validate credentials")
    except BackendError:
        logger.exception("Sign-out failed")
        raise HTTPException(status_code=503, detail=AUTH_UNAVAILABLE)
    return {"message": "Signed out"}


@router.get("/session", response_model=CurrentUser)
def get_session(current_user: CurrentUser = Depends(get_current_user)):
    return current_user
