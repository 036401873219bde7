from __future__ import annotations

from fastapi import APIRouter
from starlette.concurrency import run_in_threadpool

from campus_portal.auth.service import public_user
from campus_portal.exceptions import ValidationError

from ..deps import MUTATION_GUARD, AttachmentsDep, FieldsDep, RepositoryDep

USERS = "users"

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/{user_id}")
def get_user(user_id: str, repo: RepositoryDep):
    return public_user(repo.get(USERS, user_id))


@router.put("/{user_id}/profile", dependencies=MUTATION_GUARD)
def update_profile(user_id: str, fields: FieldsDep, repo: RepositoryDep):
    """Only firstName, lastName and email can change here; empty values are ignored."""
    user = repo.update(USERS, user_id, fields.data)
    return {"message": "Profile updated", "user": public_user(user)}


@router.post("/{user_id}/photo", dependencies=MUTATION_GUARD)
async def upload_photo(user_id: str, fields: FieldsDep, repo: RepositoryDep, attachments: AttachmentsDep):
    await run_in_threadpool(repo.get, USERS, user_id)
    upload = fields.file("photo")
    if upload is None:
        raise ValidationError("No file uploaded")
    user = await attachments.attach(USERS, user_id, upload.filename, await upload.read(), upload.content_type)
    return public_user(user)
