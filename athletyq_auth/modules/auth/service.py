import logging
from typing import Any, Dict, Optional

from supabase import AuthError, Client

from athletyq_auth.core.errors import AuthenticationError, ProviderError
from athletyq_auth.modules.auth.schemas import Account, AuthResult, Session, SignUpResult

logger = logging.getLogger(__name__)


def _provider_error(error: Exception) -> ProviderError:
    message = getattr(error, "message", None) or str(error) or "Authentication provider error"
    status = getattr(error, "status", None)
    code = getattr(error, "code", None)
    return ProviderError(
        message,
        status=status if isinstance(status, int) else None,
        code=str(code) if code else None,
    )


def _account(user: Any) -> Account:
    return Account(
        id=user.id,
        email=user.email,
        user_metadata=user.user_metadata or {},
    )


def _session(session: Any) -> Optional[Session]:
    if session is None:
        return None
    return Session(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
    )


class AuthGateway:
    """Calls into Supabase Auth. SDK errors are translated to ProviderError here."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def sign_up(
        self,
        email: str,
        password: str,
        metadata: Dict[str, Any],
        redirect_to: Optional[str] = None,
    ) -> SignUpResult:
        """Create the auth user. The profile row is not created until the email is confirmed."""
        options: Dict[str, Any] = {"data": metadata}
        if redirect_to:
            options["email_redirect_to"] = redirect_to
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": email,
                "password": password,
                "options": options,
            })
        except AuthError as e:
            logger.warning(f"Sign up rejected for {email}: {e}")
            raise _provider_error(e)

        if not auth_response.user:
            raise ProviderError("Failed to create user account.")

        return SignUpResult(
            user=_account(auth_response.user),
            session=_session(auth_response.session),
            confirmation_required=auth_response.session is None,
        )

    def verify_token(self, token_hash: str, kind: str) -> AuthResult:
        """Exchange the emailed one-time token hash for a confirmed account"""
        try:
            auth_response = self.supabase.auth.verify_otp({
                "token_hash": token_hash,
                "type": kind,
            })
        except AuthError as e:
            logger.warning(f"Token verification failed: {e}")
            raise _provider_error(e)

        if not auth_response.user:
            raise ProviderError("User not found after confirmation")
        return AuthResult(user=_account(auth_response.user), session=_session(auth_response.session))

    def establish_session(self, access_token: str, refresh_token: str) -> AuthResult:
        """Activate a session from tokens delivered in the confirmation link fragment"""
        try:
            auth_response = self.supabase.auth.set_session(access_token, refresh_token)
        except (AuthError, ValueError) as e:
            logger.warning(f"Session could not be established: {e}")
            raise _provider_error(e)

        if not auth_response.user:
            raise ProviderError("User not found after setting session")
        return AuthResult(user=_account(auth_response.user), session=_session(auth_response.session))

    def get_user(self, access_token: str) -> Account:
        """Resolve a bearer token to its account"""
        try:
            user_response = self.supabase.auth.get_user(jwt=access_token)
        except (AuthError, ValueError) as e:
            logger.info(f"Bearer token rejected: {e}")
            raise AuthenticationError("Invalid authentication token")
        if not user_response or not user_response.user:
            raise AuthenticationError("Invalid authentication token")
        return _account(user_response.user)
