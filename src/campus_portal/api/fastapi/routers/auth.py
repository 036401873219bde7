from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from campus_portal.security.tokens import Identity

from ..deps import AuthDep, FieldsDep, current_identity

router = APIRouter(tags=["Auth"])


class RegisterResponse(BaseModel):
    message: str
    id: int
    username: str


class LoginResponse(BaseModel):
    message: str
    token: str
    username: str


class IdentityResponse(BaseModel):
    id: int
    username: str


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def ping() -> str:
    return "API OK"


@router.post("/register", response_model=RegisterResponse)
async def register(fields: FieldsDep, auth: AuthDep):
    # hashing is deliberately slow; keep it off the event loop
    user = await run_in_threadpool(auth.register, fields.data.get("username"), fields.data.get("password"))
    return RegisterResponse(message="Registration successful", id=user["id"], username=user["username"])


@router.post("/login", response_model=LoginResponse)
async def login(fields: FieldsDep, auth: AuthDep):
    result = await run_in_threadpool(auth.login, fields.data.get("username"), fields.data.get("password"))
    return LoginResponse(message="Login successful", token=result.token, username=result.username)


@router.get("/me", response_model=IdentityResponse)
def me(identity: Annotated[Identity, Depends(current_identity)]):
    return IdentityResponse(id=identity.id, username=identity.username)
