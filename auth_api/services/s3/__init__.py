"""S3 service module for avatar storage"""

from auth_api.services.s3.s3_config import S3Settings
from auth_api.services.s3.s3_service import S3Service, get_storage, s3_service

__all__ = ["S3Settings", "S3Service", "get_storage", "s3_service"]
