from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel

from athletyq_auth.modules.profiles.schemas import UserRole, check_email, is_present, parse_role

DEFAULT_PASSWORD_MIN_LENGTH = 6
CONFIRM_TYPES = ("signup", "email")


class SignupRequest(BaseModel):
    """Signup body. fullName and role are optional but travel together.

    The password minimum comes from the validation context
    (``password_min_length``), falling back to 6.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: str
    password: str
    full_name: Optional[str] = Field(default=None, validate_default=True)
    role: Optional[UserRole] = Field(default=None, validate_default=True)

    @model_validator(mode="before")
    @classmethod
    def require_credentials(cls, data: Any):
        if isinstance(data, dict):
            password = data.get("password")
            if not is_present(data.get("email")) or not isinstance(password, str) or not password:
                raise ValueError("Email and password are required")
        return data

    @field_validator("email")
    @classmethod
    def email_format(cls, value: str) -> str:
        return check_email(value)

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str, info: ValidationInfo) -> str:
        min_length = (info.context or {}).get("password_min_length", DEFAULT_PASSWORD_MIN_LENGTH)
        if len(value) < min_length:
            raise ValueError(f"Password must be at least {min_length} characters long")
        return value

    @field_validator("full_name", mode="before")
    @classmethod
    def strip_full_name(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if not is_present(value):
            raise ValueError("fullName and role are required")
        return value.strip()

    @field_validator("role", mode="before")
    @classmethod
    def role_with_full_name(cls, value: Any, info: ValidationInfo) -> Optional[UserRole]:
        full_name = info.data.get("full_name")
        if value is None and full_name is None:
            return None
        if not is_present(value) or not full_name:
            raise ValueError("fullName and role are required")
        return parse_role(value)

    def metadata(self) -> Dict[str, Any]:
        """user_metadata stored on the account until the profile row is created"""
        data: Dict[str, Any] = {"email": self.email}
        if self.full_name:
            data["full_name"] = self.full_name
        if self.role:
            data["role"] = self.role.value
        return data


class ConfirmParams(BaseModel):
    token_hash: str
    type: str
    redirect_to: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def require_token(cls, data: Any):
        if isinstance(data, dict) and (not data.get("token_hash") or not data.get("type")):
            raise ValueError("Missing token_hash or type parameter")
        return data

    @field_validator("type")
    @classmethod
    def supported_type(cls, value: str) -> str:
        if value not in CONFIRM_TYPES:
            raise ValueError(f"Unsupported confirmation type: {value}")
        return value


class Account(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)


class Session(BaseModel):
    access_token: str
    refresh_token: str
    expires_at: Optional[int] = None


class AuthResult(BaseModel):
    user: Account
    session: Optional[Session] = None


class SignUpResult(AuthResult):
    confirmation_required: bool


class SignupResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    email: Optional[str] = None
    confirmation_required: bool
