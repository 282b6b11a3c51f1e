"""User and profile schemas."""

from pydantic import model_validator

from conduit.schemas.base import CamelModel


class NewUser(CamelModel):
    """Registration payload."""

    username: str
    email: str
    password: str


class NewUserRequest(CamelModel):
    user: NewUser


class LoginUser(CamelModel):
    """Login payload. Either ``email`` or ``username`` identifies the user."""

    email: str | None = None
    username: str | None = None
    password: str

    @model_validator(mode="after")
    def require_identifier(self) -> "LoginUser":
        """Validate that some login identifier was sent."""
        if not self.email and not self.username:
            raise ValueError("Either email or username is required")
        return self

    @property
    def login(self) -> str:
        return self.email or self.username or ""


class LoginUserRequest(CamelModel):
    user: LoginUser


class UpdateUser(CamelModel):
    """Partial profile update. Omitted fields are left unchanged."""

    email: str | None = None
    password: str | None = None
    bio: str | None = None
    image: str | None = None


class UpdateUserRequest(CamelModel):
    user: UpdateUser


class UserView(CamelModel):
    """The authenticated user, with a fresh session token."""

    email: str
    token: str
    username: str
    bio: str
    image: str | None


class UserResponse(CamelModel):
    user: UserView


class ProfileView(CamelModel):
    """Public view of a user as seen by the caller."""

    username: str
    bio: str
    image: str | None
    following: bool


class ProfileResponse(CamelModel):
    profile: ProfileView
