"""Profiles router: public profiles and follow edges."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.auth.dependencies import AuthUser, get_current_user, get_optional_user
from conduit.database import get_db
from conduit.errors import AlreadyFollowingError
from conduit.routers.views import profile_view
from conduit.schemas.users import ProfileResponse
from conduit.services.identity import IdentityStore
from conduit.services.social import SocialGraph

router = APIRouter(prefix="/api/profiles", tags=["Profiles"])


@router.get(
    "/{username}",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
)
async def get_profile(
    username: str,
    db: AsyncSession = Depends(get_db),
    auth: AuthUser | None = Depends(get_optional_user),
) -> ProfileResponse:
    """Get a user's public profile. ``following`` is false for anonymous callers."""
    user = await IdentityStore(db).get_by_username(username)
    viewer_id = auth.user_id if auth else None
    following = await SocialGraph(db).is_following(viewer_id, user.user_id)
    return ProfileResponse(profile=profile_view(user, following))


@router.post(
    "/{username}/follow",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
)
async def follow_user(
    username: str,
    db: AsyncSession = Depends(get_db),
    auth: AuthUser = Depends(get_current_user),
) -> ProfileResponse:
    """Follow a user. Following someone already followed is a no-op."""
    identity = IdentityStore(db)
    user = await identity.get_by_username(username)

    try:
        await SocialGraph(db).follow(auth.user_id, user.user_id)
    except AlreadyFollowingError:
        # Already following, return success (idempotent)
        user = await identity.get_by_username(username)

    return ProfileResponse(profile=profile_view(user, True))


@router.delete(
    "/{username}/follow",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
)
async def unfollow_user(
    username: str,
    db: AsyncSession = Depends(get_db),
    auth: AuthUser = Depends(get_current_user),
) -> ProfileResponse:
    """Unfollow a user. Answers 404 when the caller was not following them."""
    user = await IdentityStore(db).get_by_username(username)
    await SocialGraph(db).unfollow(auth.user_id, user.user_id)
    return ProfileResponse(profile=profile_view(user, False))
