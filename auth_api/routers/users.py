"""Users router for account and profile management"""

import io
from uuid import UUID

from botocore.exceptions import ClientError
from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from auth_api.db import get_db
from auth_api.middleware.rate_limit import RateLimit
from auth_api.models import User
from auth_api.schemas.user import (
    ProfileResponse,
    ProfileUpdate,
    PublicProfileResponse,
    PublicUserResponse,
    UserResponse,
)
from auth_api.services.accounts import account_store
from auth_api.services.auth import get_current_user
from auth_api.services.rate_limit import STRICT
from auth_api.services.s3 import S3Service, get_storage
from auth_api.services.tokens import token_service
from auth_api.utils.constants import ALLOWED_IMAGE_TYPES, MAX_AVATAR_SIZE_BYTES, MAX_AVATAR_SIZE_MB
from auth_api.utils.logger import logger
from auth_api.utils.response_utils import error_response, success

router = APIRouter(prefix="/users", tags=["Users"])


async def _get_or_create_profile(user: User, db: AsyncSession):
    profile = await account_store.get_profile(user.id, db)
    if profile is None:
        profile = await account_store.insert_profile(user.id, db)
    return profile


@router.get("/me")
async def get_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Current user with profile."""
    profile = await account_store.get_profile(user.id, db)
    return success(
        {
            "user": UserResponse.model_validate(user).to_wire(),
            "profile": ProfileResponse.model_validate(profile).to_wire() if profile else None,
        },
        "User retrieved successfully",
    )


@router.patch("/me/profile")
async def update_profile(
    data: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Update profile fields.

    Only fields present in the body are changed; an empty avatarUrl clears it.
    """
    fields = data.model_dump(exclude_unset=True)
    if fields.get("avatar_url") == "":
        fields["avatar_url"] = None

    profile = await _get_or_create_profile(user, db)
    await account_store.update_profile(profile, db, **fields)
    await db.commit()

    return success(
        {"profile": ProfileResponse.model_validate(profile).to_wire()},
        "Profile updated successfully",
    )


@router.post("/me/avatar")
async def upload_avatar(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: S3Service = Depends(get_storage),
):
    """Upload a profile image (JPEG, PNG, GIF or WebP, at most 5MB)."""
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        return error_response(
            "Invalid file type",
            errors=[f"Allowed types: {', '.join(ALLOWED_IMAGE_TYPES)}"],
        )

    contents = await file.read(MAX_AVATAR_SIZE_BYTES + 1)
    if len(contents) > MAX_AVATAR_SIZE_BYTES:
        return error_response(
            "File too large",
            errors=[f"Avatar must be at most {MAX_AVATAR_SIZE_MB}MB"],
        )
    if not contents:
        return error_response("Empty file")

    try:
        avatar_url = await storage.upload_fileobj(
            io.BytesIO(contents),
            storage.avatar_key(user.id),
            content_type=file.content_type,
        )
    except ClientError as e:
        logger.error(f"Avatar upload failed for user {user.id}: {e}")
        return error_response("Failed to upload avatar", status_code=status.HTTP_502_BAD_GATEWAY)

    profile = await _get_or_create_profile(user, db)
    await account_store.update_profile(profile, db, avatar_url=avatar_url)
    await db.commit()

    return success(
        {"profile": ProfileResponse.model_validate(profile).to_wire()},
        "Avatar uploaded successfully",
    )


@router.delete("/me", dependencies=[Depends(RateLimit(STRICT))])
async def delete_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Soft-delete the account and sign out every session."""
    await account_store.soft_delete_user(user, db)
    await token_service.revoke_all(user.id, db)
    await db.commit()
    return success(message="Account deleted successfully")


@router.get("/{user_id}")
async def get_user(user_id: UUID, db: AsyncSession = Depends(get_db)):
    """Public view of an active user."""
    user = await account_store.find_active_user_by_id(user_id, db)
    if user is None:
        return error_response("User not found", status_code=status.HTTP_404_NOT_FOUND)

    profile = await account_store.get_profile(user.id, db)
    public_user = PublicUserResponse(
        id=user.id,
        created_at=user.created_at,
        profile=PublicProfileResponse.model_validate(profile) if profile and profile.is_public else None,
    )
    return success({"user": public_user.to_wire()}, "User retrieved successfully")
