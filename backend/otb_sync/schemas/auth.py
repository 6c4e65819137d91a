from pydantic import BaseModel, Field


class LoginIn(BaseModel):
    username: str = Field(min_length=1, max_length=128)
    password: str = Field(min_length=1, max_length=256)


class UserOut(BaseModel):
    id: int | None = None
    username: str
    display_name: str | None = None


class LoginOut(BaseModel):
    ok: bool = True
    user: UserOut


class MeOut(BaseModel):
    user: UserOut
