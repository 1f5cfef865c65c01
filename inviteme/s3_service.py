import io
import logging
import uuid

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from . import config
from .exceptions import BackendError

logger = logging.getLogger(__name__)

s3_client = boto3.client(
    "s3",
    aws_access_key_id=config.AWS_ACCESS_KEY,
    aws_secret_access_key=config.AWS_SECRET_KEY,
    region_name=config.AWS_REGION,
    config=Config(signature_version="s3v4")
)

INVITATION_CONTENT_TYPE = "image/jpeg"


def new_invitation_key() -> str:
    return f"{uuid.uuid4()}.jpg"


def upload_invitation(image: bytes, file_name: str = None) -> str:
    """
    Upload a composed invitation image to the invites bucket.

    Args:
        image (bytes): The JPEG bytes.
        file_name (str): Destination key. A random "<uuid>.jpg" when omitted.

    Returns:
        str: The key the image was stored under.
    """
    file_name = file_name or new_invitation_key()
    try:
        s3_client.upload_fileobj(
            io.BytesIO(image),
            config.INVITES_BUCKET,
            file_name,
            ExtraArgs={"ContentType": INVITATION_CONTENT_TYPE}
        )
    except NoCredentialsError as e:
        raise BackendError("Credentials not available") from e
    except (BotoCoreError, ClientError) as e:
        raise BackendError(f"Error uploading invitation: {str(e)}") from e

    logger.info("Invitation uploaded to %s/%s", config.INVITES_BUCKET, file_name)
    return file_name


def get_public_url(file_name: str) -> str:
    return f"https://{config.INVITES_BUCKET}.s3.amazonaws.com/{file_name}"


def resolve_invitation_url(invitation_path: str):
    """
    Turn a stored invitation path into a URL the browser can load.

    Absolute URLs are returned as-is; storage keys become public bucket URLs.
    """
    if not invitation_path:
        return None
    if invitation_path.startswith("http"):
        return invitation_path
    return get_public_url(invitation_path)
