from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Annotated, Any

from fastapi import Depends, Request
from starlette.datastructures import UploadFile

from campus_portal.app.settings import PortalSettings
from campus_portal.auth.service import AuthService
from campus_portal.db.document import DocumentStore
from campus_portal.db.repository import CollectionRepository
from campus_portal.exceptions import ValidationError
from campus_portal.security.tokens import Identity
from campus_portal.storage.attachments import AttachmentManager


@dataclass
class PortalContext:
    """Everything a request handler needs, built once per app."""

    settings: PortalSettings
    store: DocumentStore
    repository: CollectionRepository
    attachments: AttachmentManager
    auth: AuthService


def get_context(request: Request) -> PortalContext:
    return request.app.state.portal


def get_repository(ctx: Annotated[PortalContext, Depends(get_context)]) -> CollectionRepository:
    return ctx.repository


def get_attachments(ctx: Annotated[PortalContext, Depends(get_context)]) -> AttachmentManager:
    return ctx.attachments


def get_auth_service(ctx: Annotated[PortalContext, Depends(get_context)]) -> AuthService:
    return ctx.auth


RepositoryDep = Annotated[CollectionRepository, Depends(get_repository)]
AttachmentsDep = Annotated[AttachmentManager, Depends(get_attachments)]
AuthDep = Annotated[AuthService, Depends(get_auth_service)]


@dataclass
class RequestFields:
    """Body fields of a JSON, urlencoded or multipart request."""

    data: dict[str, Any] = field(default_factory=dict)
    files: dict[str, UploadFile] = field(default_factory=dict)

    def file(self, name: str) -> UploadFile | None:
        upload = self.files.get(name)
        if upload is None or not upload.filename:
            return None
        return upload


async def request_fields(request: Request) -> RequestFields:
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type in ("application/x-www-form-urlencoded", "multipart/form-data"):
        form = await request.form()
        fields = RequestFields()
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                fields.files.setdefault(key, value)
            else:
                fields.data.setdefault(key, value)
        return fields

    body = await request.body()
    if not body.strip():
        return RequestFields()
    try:
        data = json.loads(body)
    except ValueError:
        raise ValidationError("Malformed JSON body") from None
    if not isinstance(data, dict):
        raise ValidationError("Request body must be an object")
    return RequestFields(data=data)


FieldsDep = Annotated[RequestFields, Depends(request_fields)]


def current_identity(request: Request, auth: AuthDep) -> Identity:
    """Bearer-token check; 401 when the token is missing, 403 when it is invalid."""
    return auth.verify_header(request.headers.get("authorization"))


def guard_mutation(request: Request, ctx: Annotated[PortalContext, Depends(get_context)]) -> Identity | None:
    """Token check for write routes, enforced only when ``require_auth`` is set."""
    if not ctx.settings.require_auth:
        return None
    return ctx.auth.verify_header(request.headers.get("authorization"))


MUTATION_GUARD = [Depends(guard_mutation)]
