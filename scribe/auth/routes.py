# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /register - Create account
#   POST /login    - Get a bearer token
#
# There is no refresh or logout: tokens are stateless and simply expire.
#
# =============================================================================

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from scribe.auth.credentials import register_user, verify_credentials
from scribe.auth.jwt import TokenCodec
from scribe.auth.policies import get_token_codec
from scribe.core.errors import ValidationFailure
from scribe.core.models import UserIdentity, UserResponse
from scribe.storage.base import CredentialStore

router = APIRouter(tags=["auth"])


def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.storage.credentials


# =============================================================================
# Request/Response Models
# =============================================================================

class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1)
    email: EmailStr | None = None
    admin: bool = False


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    identifier: str = Field(alias="usernameOrEmail", min_length=1)
    password: str
    remember_me: bool = Field(default=False, alias="rememberMe")


class LoginResponse(BaseModel):
    token: str
    user: UserIdentity


# =============================================================================
# Public Endpoints
# =============================================================================

@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    data: RegisterRequest,
    request: Request,
    store: CredentialStore = Depends(get_credential_store),
):
    """
    Create a new account.

    Returns the created user (never the password hash).
    """
    if data.admin and not request.app.state.settings.allow_admin_registration:
        raise ValidationFailure("Admin registration is disabled")

    user = await register_user(
        store,
        username=data.username,
        password=data.password,
        email=data.email,
        admin=data.admin,
    )
    return UserResponse(id=user.id, username=user.username, email=user.email, admin=user.admin)


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    store: CredentialStore = Depends(get_credential_store),
    codec: TokenCodec = Depends(get_token_codec),
):
    """
    Authenticate and get a token.

    Unknown user and wrong password fail with the same 400.
    """
    identity = await verify_credentials(store, data.identifier, data.password)
    issued = codec.issue(identity, remember=data.remember_me)
    return LoginResponse(token=issued.token, user=identity)
