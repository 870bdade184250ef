from datetime import datetime
import uuid
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class UserBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: EmailStr
    user_name: str = Field(..., min_length=1, max_length=255)


class UserRegister(UserBase):
    firebase_uid: str = Field(..., min_length=1, max_length=128)
    firebase_sign_in_provider: str = "password"


class UserLogin(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    firebase_uid: str = Field(..., min_length=1, max_length=128)


class User(UserBase):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: uuid.UUID
    is_active: bool
    has_completed_onboarding: bool
    created_at: datetime
    updated_at: datetime
