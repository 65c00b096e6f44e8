import logging
from typing import Optional
from urllib.parse import urljoin, urlparse

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse

from athletyq_auth.config.settings import Settings, settings as app_settings
from athletyq_auth.core.dependencies import (
    get_auth_gateway, get_bearer_token, get_profile_service, get_settings, read_json_object
)
from athletyq_auth.core.errors import AppError, ForbiddenError, ProviderError
from athletyq_auth.core.rate_limit import limiter
from athletyq_auth.core.responses import ok
from athletyq_auth.modules.auth.schemas import SignupResponse
from athletyq_auth.modules.auth.service import AuthGateway
from athletyq_auth.modules.auth.validators import (
    validate_confirm_params, validate_create_profile_payload, validate_signup_payload
)
from athletyq_auth.modules.profiles.service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _resolve_redirect(request: Request, redirect_to: Optional[str], settings: Settings) -> str:
    """Resolve redirect_to against the request URL; foreign hosts fall back to the default."""
    target = redirect_to or settings.confirm_default_redirect
    parsed = urlparse(target)
    if parsed.scheme or parsed.netloc:
        host = (parsed.hostname or "").lower()
        allowed = settings.get_allowed_redirect_hosts() + [(request.url.hostname or "").lower()]
        if parsed.scheme not in ("http", "https") or host not in allowed:
            logger.warning(f"Refusing redirect to foreign host: {target}")
            target = settings.confirm_default_redirect
    return urljoin(str(request.url), target)


@router.post("/signup", status_code=201)
@limiter.limit(app_settings.signup_rate_limit)
async def signup(
    request: Request,
    gateway: AuthGateway = Depends(get_auth_gateway),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Create the auth account; the profile is created after email confirmation"""
    logger.info("Signup API called")
    body = await read_json_object(request)
    signup_data = validate_signup_payload(body, settings.password_min_length)

    result = gateway.sign_up(
        signup_data.email,
        signup_data.password,
        signup_data.metadata(),
        redirect_to=settings.email_redirect_to,
    )
    logger.info(
        f"Account created for {signup_data.email} (confirmation required: {result.confirmation_required})"
    )
    data = SignupResponse(
        user_id=result.user.id,
        email=result.user.email or signup_data.email,
        confirmation_required=result.confirmation_required,
    )
    return ok(data.model_dump(by_alias=True), status_code=201)


@router.get("/confirm")
async def confirm(
    request: Request,
    token_hash: Optional[str] = None,
    type: Optional[str] = None,
    redirect_to: Optional[str] = None,
    gateway: AuthGateway = Depends(get_auth_gateway),
    profile_service: ProfileService = Depends(get_profile_service),
    settings: Settings = Depends(get_settings),
):
    """Target of the emailed confirmation link: verify the token, create the profile, redirect"""
    params = validate_confirm_params(token_hash, type, redirect_to)

    try:
        result = gateway.verify_token(params.token_hash, params.type)
    except ProviderError as e:
        raise ProviderError(
            e.message,
            code=str(e.status) if e.status else e.code,
            status_code=400,
        ) from e

    try:
        profile_service.create_from_account(result.user)
    except AppError as e:
        # The confirmation page retries through /create-profile
        logger.error(f"Failed to create profile for {result.user.id}: {e.message} ({e.code})")

    return RedirectResponse(_resolve_redirect(request, params.redirect_to, settings), status_code=303)


@router.post("/create-profile")
async def create_profile(
    request: Request,
    token: str = Depends(get_bearer_token),
    gateway: AuthGateway = Depends(get_auth_gateway),
    profile_service: ProfileService = Depends(get_profile_service),
) -> JSONResponse:
    """Create the profile for the authenticated account. Repeat calls are no-ops."""
    body = await read_json_object(request)
    profile_data = validate_create_profile_payload(body)

    account = gateway.get_user(token)
    if account.id != profile_data.user_id:
        logger.warning(f"User ID mismatch: token for {account.id}, body for {profile_data.user_id}")
        raise ForbiddenError("User ID mismatch")

    creation = profile_service.create_profile(profile_data)
    status_code = 201 if creation.created else 200
    return ok(creation.model_dump(by_alias=True, exclude_none=True), status_code=status_code)
