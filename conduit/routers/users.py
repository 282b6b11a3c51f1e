"""Users router: registration, login, and the current user."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.auth.dependencies import AuthUser, get_current_user
from conduit.database import get_db
from conduit.models import User
from conduit.schemas.users import (
    LoginUserRequest,
    NewUserRequest,
    UpdateUserRequest,
    UserResponse,
    UserView,
)
from conduit.services.identity import IdentityStore

router = APIRouter(prefix="/api", tags=["Users"])


def _user_response(user: User, token: str) -> UserResponse:
    return UserResponse(
        user=UserView(
            email=user.email,
            token=token,
            username=user.username,
            bio=user.bio,
            image=user.image,
        )
    )


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    data: NewUserRequest,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """
    Create a new user account.

    Returns the user together with a session token, so the client is signed
    in right away.
    """
    store = IdentityStore(db)
    user = await store.register(data.user.username, data.user.email, data.user.password)
    return _user_response(user, store.issue_token(user.user_id))


@router.post(
    "/users/login",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
)
async def login(
    data: LoginUserRequest,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Exchange a username or email plus password for a session token."""
    user, token = await IdentityStore(db).authenticate(data.user.login, data.user.password)
    return _user_response(user, token)


@router.get(
    "/user",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
)
async def get_current_user_profile(
    db: AsyncSession = Depends(get_db),
    auth: AuthUser = Depends(get_current_user),
) -> UserResponse:
    """Get the authenticated user, echoing the token they presented."""
    user = await IdentityStore(db).get_by_id(auth.user_id)
    return _user_response(user, auth.token)


@router.put(
    "/user",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
)
async def update_current_user(
    data: UpdateUserRequest,
    db: AsyncSession = Depends(get_db),
    auth: AuthUser = Depends(get_current_user),
) -> UserResponse:
    """
    Update the authenticated user.

    Omitted fields are left unchanged; an empty ``image`` clears it.
    """
    user = await IdentityStore(db).update_profile(
        auth.user_id,
        bio=data.user.bio,
        image=data.user.image,
        email=data.user.email,
        password=data.user.password,
    )
    return _user_response(user, auth.token)
