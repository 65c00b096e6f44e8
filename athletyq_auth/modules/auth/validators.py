"""
Request parsing for the auth endpoints. The rules live on the pydantic
models; failures surface as ValidationError (400) carrying the message of the
first rule that failed.
"""

from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from athletyq_auth.core.errors import ValidationError
from athletyq_auth.modules.auth.schemas import ConfirmParams, SignupRequest
from athletyq_auth.modules.profiles.schemas import CreateProfileRequest, is_present

ModelT = TypeVar("ModelT", bound=BaseModel)


def first_error_message(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    cause = (error.get("ctx") or {}).get("error")
    if isinstance(cause, ValueError):
        return str(cause)
    return error["msg"]


def parse_model(model: Type[ModelT], data: Dict[str, Any], **context: Any) -> ModelT:
    try:
        return model.model_validate(data, context=context or None)
    except PydanticValidationError as e:
        raise ValidationError(first_error_message(e)) from e


def validate_signup_payload(body: Dict[str, Any], min_length: int = 6) -> SignupRequest:
    return parse_model(SignupRequest, body, password_min_length=min_length)


def validate_create_profile_payload(body: Dict[str, Any]) -> CreateProfileRequest:
    return parse_model(CreateProfileRequest, body)


def validate_profile_metadata(user_id: str, metadata: Dict[str, Any], email: Optional[str]) -> CreateProfileRequest:
    """Build a profile request from account metadata collected at signup"""
    full_name = metadata.get("full_name")
    role = metadata.get("role")
    email = email or metadata.get("email")
    if not all(is_present(v) for v in (full_name, role, email)):
        raise ValidationError("Missing required profile data (fullName, role, or email).")
    return parse_model(CreateProfileRequest, {
        "user_id": user_id,
        "full_name": full_name,
        "role": role,
        "email": email,
    })


def validate_confirm_params(
    token_hash: Optional[str],
    type: Optional[str],
    redirect_to: Optional[str] = None,
) -> ConfirmParams:
    return parse_model(ConfirmParams, {"token_hash": token_hash, "type": type, "redirect_to": redirect_to})
