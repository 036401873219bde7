from __future__ import annotations

from fastapi import APIRouter
from starlette.concurrency import run_in_threadpool

from campus_portal.db.collections import get_spec
from campus_portal.exceptions import ValidationError

from ..deps import MUTATION_GUARD, AttachmentsDep, FieldsDep, RepositoryDep

ASSIGNMENTS = "assignments"

router = APIRouter(prefix="/assignments", tags=["Assignments"])


@router.get("")
def list_assignments(repo: RepositoryDep):
    return repo.list(ASSIGNMENTS)


@router.get("/{assignment_id}")
def get_assignment(assignment_id: str, repo: RepositoryDep):
    return repo.get(ASSIGNMENTS, assignment_id)


@router.post("", dependencies=MUTATION_GUARD)
async def create_assignment(fields: FieldsDep, repo: RepositoryDep, attachments: AttachmentsDep):
    get_spec(ASSIGNMENTS).build(fields.data)  # reject incomplete data before storing any file
    upload = fields.file("image")
    record = await run_in_threadpool(repo.create, ASSIGNMENTS, fields.data)
    if upload is None:
        return record
    try:
        return await attachments.attach(ASSIGNMENTS, record, upload.filename, await upload.read(), upload.content_type)
    except Exception:
        await run_in_threadpool(repo.delete, ASSIGNMENTS, record["id"])
        raise


@router.put("/{assignment_id}", dependencies=MUTATION_GUARD)
async def update_assignment(assignment_id: str, fields: FieldsDep, repo: RepositoryDep, attachments: AttachmentsDep):
    record = await run_in_threadpool(repo.update, ASSIGNMENTS, assignment_id, fields.data)
    upload = fields.file("image")
    if upload is not None:
        record = await attachments.attach(ASSIGNMENTS, record, upload.filename, await upload.read(), upload.content_type)
    return record


@router.delete("/{assignment_id}", dependencies=MUTATION_GUARD)
async def delete_assignment(assignment_id: str, repo: RepositoryDep, attachments: AttachmentsDep):
    record = await run_in_threadpool(repo.get, ASSIGNMENTS, assignment_id)
    await run_in_threadpool(repo.delete, ASSIGNMENTS, assignment_id)
    await attachments.release(ASSIGNMENTS, record)
    return {"message": "Assignment deleted"}


@router.post("/{assignment_id}/upload", dependencies=MUTATION_GUARD)
async def upload_image(assignment_id: str, fields: FieldsDep, attachments: AttachmentsDep):
    upload = fields.file("image")
    if upload is None:
        raise ValidationError("No file uploaded")
    return await attachments.attach(ASSIGNMENTS, assignment_id, upload.filename, await upload.read(), upload.content_type)


@router.delete("/{assignment_id}/image", dependencies=MUTATION_GUARD)
async def delete_image(assignment_id: str, repo: RepositoryDep, attachments: AttachmentsDep):
    record = await run_in_threadpool(repo.get, ASSIGNMENTS, assignment_id)
    if not record.get("image"):
        raise ValidationError("Assignment has no image")
    return await attachments.clear(ASSIGNMENTS, record)
