from pydantic import BaseModel, ConfigDict, Field

from typing import Optional

# Request fields are optional so that presence is checked by the service,
# which reports missing fields with a 400 and a specific message.


class SignupRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class SigninRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: Optional[str] = None
    new_password: Optional[str] = Field(default=None, alias="newPassword")


class MessageResponse(BaseModel):
    message: str


class SignupResponse(BaseModel):
    message: str
    userId: str


class PublicUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: Optional[str] = None


class SigninResponse(BaseModel):
    message: str
    token: str
    user: PublicUser
