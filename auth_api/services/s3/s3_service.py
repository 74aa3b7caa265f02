"""S3 service for uploading and serving avatar images"""

import logging
from typing import BinaryIO, Optional

import aioboto3
from botocore.config import Config
from botocore.exceptions import ClientError

from auth_api.services.s3.s3_config import S3Settings

logger = logging.getLogger(__name__)


class S3Service:
    """Service for managing S3 operations for user assets"""

    def __init__(self):
        """Initialize S3 service - credentials are loaded lazily on first use"""
        self._session = None
        self._config = None
        self._cached_access_key = None

    def _get_settings(self) -> S3Settings:
        """Read settings at usage time, after .env files have been loaded."""
        return S3Settings()

    def _get_session(self):
        """Get or create the aioboto3 session, rebuilding it if credentials change."""
        settings = self._get_settings()
        access_key = settings.AWS_ACCESS_KEY_ID

        if self._session is None or self._cached_access_key != access_key:
            self._session = aioboto3.Session(
                aws_access_key_id=access_key,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=settings.AWS_REGION,
            )
            self._cached_access_key = access_key
            self._config = Config(
                region_name=settings.AWS_REGION,
                signature_version="s3v4",
                retries={"max_attempts": 3, "mode": "adaptive"},
            )
            logger.info(
                f"S3 session initialized with access key: {access_key[:8]}..."
                if access_key
                else "S3 session initialized with empty credentials"
            )

        return self._session, self._config

    @property
    def bucket_name(self) -> str:
        return self._get_settings().BUCKET_NAME

    def public_url(self, s3_key: str) -> str:
        settings = self._get_settings()
        if settings.PUBLIC_BASE_URL:
            return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/{s3_key}"
        return f"https://{settings.BUCKET_NAME}.s3.{settings.AWS_REGION}.amazonaws.com/{s3_key}"

    async def upload_fileobj(
        self,
        file_obj: BinaryIO,
        s3_key: str,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Upload a file-like object to S3

        Args:
            file_obj: File-like object to upload (e.g., from FastAPI UploadFile)
            s3_key: S3 key (path) where the file will be stored
            content_type: MIME type of the file

        Returns:
            Public URL of the stored object

        Raises:
            ClientError: If S3 upload fails
        """
        session, config = self._get_session()
        async with session.client("s3", config=config) as s3_client:
            extra_args = {}
            if content_type:
                extra_args["ContentType"] = content_type

            logger.info(f"Uploading file object to s3://{self.bucket_name}/{s3_key}")

            try:
                await s3_client.upload_fileobj(
                    file_obj, self.bucket_name, s3_key, ExtraArgs=extra_args or None
                )
            except ClientError as e:
                logger.error(f"Failed to upload file object to S3: {e}", exc_info=True)
                raise

        logger.info(f"Successfully uploaded {s3_key} to S3")
        return self.public_url(s3_key)

    @staticmethod
    def avatar_key(user_id) -> str:
        return f"avatars/{user_id}/avatar"


s3_service = S3Service()


def get_storage() -> S3Service:
    """FastAPI dependency returning the asset storage service"""
    return s3_service
