from typing import Optional

from pydantic import BaseModel, ConfigDict


class LoginIn(BaseModel):
    username: str = ""
    password: str = ""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "camille.durand@example.com",
                "password": "0611223344",
            }
        }
    )


class LoginUserOut(BaseModel):
    id: str
    role: str
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    hairdresserId: Optional[str] = None


class LoginOut(BaseModel):
    success: bool
    user: LoginUserOut


class MeOut(BaseModel):
    id: str
    role: str
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    hairdresser_id: Optional[str] = None
