"""AWS S3 configuration for avatar storage"""

from pydantic_settings import BaseSettings


class S3Settings(BaseSettings):
    """AWS S3 configuration for user-uploaded assets"""

    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    BUCKET_NAME: str = ""
    # Optional CDN/public origin; falls back to the bucket's S3 URL
    PUBLIC_BASE_URL: str = ""

    class Config:
        env_prefix = "S3_"
