import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class UserRole(str, Enum):
    ATHLETE = "athlete"
    COACH = "coach"
    ORGANIZATION = "organization"


def is_present(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def parse_role(value: Any) -> UserRole:
    try:
        return UserRole(value)
    except ValueError:
        raise ValueError(f"Invalid role: {value}")


def check_email(value: str) -> str:
    if not EMAIL_RE.match(value):
        raise ValueError("Invalid email format")
    return value


class CreateProfileRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    full_name: str
    role: UserRole
    email: str

    @model_validator(mode="before")
    @classmethod
    def require_all_fields(cls, data: Any):
        if isinstance(data, dict):
            values = [
                data.get(alias, data.get(name))
                for name, alias in (
                    ("user_id", "userId"), ("full_name", "fullName"), ("role", "role"), ("email", "email")
                )
            ]
            if not all(is_present(v) for v in values):
                raise ValueError("userId, fullName, role, and email are required")
        return data

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, value: str) -> str:
        return value.strip()

    @field_validator("role", mode="before")
    @classmethod
    def known_role(cls, value: Any) -> UserRole:
        return parse_role(value)

    @field_validator("email")
    @classmethod
    def email_format(cls, value: str) -> str:
        return check_email(value)


class InsertOutcome(str, Enum):
    CREATED = "created"
    ALREADY_EXISTED = "already_existed"


class ProfileCreation(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    created: bool
    message: Optional[str] = None
