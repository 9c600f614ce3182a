from typing import Any, Dict, Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from codearena.config import Config as AppConfig
from codearena.config import logger
from codearena.errors import ExternalServiceException

s3_logger = logger.getChild("s3")


def get_s3_client():
    """Create and return a synchronous S3 client for the object store."""
    session = boto3.session.Session()
    return session.client(
        "s3",
        endpoint_url=AppConfig.AWS_ENDPOINT_URL,
        region_name=AppConfig.AWS_REGION,
        aws_access_key_id=AppConfig.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=AppConfig.AWS_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
    )


def public_url(object_key: str) -> str:
    return f"{AppConfig.STORAGE_PUBLIC_URL}/{object_key}"


def upload_profile_pic(
    s3_client, object_key: str, body: bytes, content_type: str
) -> str:
    """Upload a profile picture and return its public URL."""
    try:
        s3_client.put_object(
            Bucket=AppConfig.AWS_BUCKET_NAME,
            Key=object_key,
            Body=body,
            ACL="public-read",
            ContentType=content_type,
        )
        s3_logger.info(f"Uploaded profile picture to {object_key}")
        return public_url(object_key)
    except (ClientError, BotoCoreError) as e:
        s3_logger.error(f"Error uploading profile picture {object_key}: {str(e)}")
        raise ExternalServiceException(detail="Failed to upload profile picture")


def create_video_upload(s3_client, object_key: str) -> Dict[str, Any]:
    """Presigned POST letting the client upload a solution video directly."""
    try:
        presigned = s3_client.generate_presigned_post(
            Bucket=AppConfig.AWS_BUCKET_NAME,
            Key=object_key,
            Fields={"acl": "public-read"},
            Conditions=[
                {"acl": "public-read"},
                ["starts-with", "$Content-Type", "video/"],
                ["content-length-range", 1, AppConfig.VIDEO_MAX_SIZE],
            ],
            ExpiresIn=AppConfig.VIDEO_UPLOAD_EXPIRY,
        )
        s3_logger.info(f"Generated upload signature for {object_key}")
        return presigned
    except (ClientError, BotoCoreError) as e:
        s3_logger.error(f"Error generating upload signature for {object_key}: {str(e)}")
        raise ExternalServiceException(detail="Failed to generate upload credentials")


def get_object_metadata(s3_client, object_key: str) -> Optional[Dict[str, Any]]:
    """Return the object's metadata, or None when it does not exist."""
    try:
        return s3_client.head_object(Bucket=AppConfig.AWS_BUCKET_NAME, Key=object_key)
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code")
        if code in ("404", "NoSuchKey", "NotFound"):
            return None
        s3_logger.error(f"Error reading metadata for {object_key}: {str(e)}")
        raise ExternalServiceException(detail="Failed to reach object storage")
    except BotoCoreError as e:
        s3_logger.error(f"Error reading metadata for {object_key}: {str(e)}")
        raise ExternalServiceException(detail="Failed to reach object storage")


def delete_object(s3_client, object_key: str) -> None:
    try:
        s3_client.delete_object(Bucket=AppConfig.AWS_BUCKET_NAME, Key=object_key)
        s3_logger.info(f"Deleted object {object_key}")
    except (ClientError, BotoCoreError) as e:
        s3_logger.error(f"Error deleting object {object_key}: {str(e)}")
        raise ExternalServiceException(detail="Failed to delete stored object")
