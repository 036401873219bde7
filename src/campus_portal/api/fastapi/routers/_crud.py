"""Route factory shared by the plain CRUD collections.

Each collection module builds its router from here and adds whatever extra
routes it needs (``/exams/{id}/questions``, ``/calendar/date/{date}``).
"""

from __future__ import annotations

from fastapi import APIRouter

from campus_portal.db.repository import record_label
from campus_portal.exceptions import NotFoundError

from ..deps import MUTATION_GUARD, FieldsDep, RepositoryDep


def crud_router(
        collection: str,
        *,
        prefix: str | None = None,
        tag: str | None = None,
        create_status: int = 200,
        list_route: bool = True,
) -> APIRouter:
    router = APIRouter(prefix=prefix or f"/{collection}", tags=[tag or collection.capitalize()])
    label = record_label(collection)

    if list_route:
        @router.get("", name=f"list_{collection}")
        def list_records(repo: RepositoryDep):
            return repo.list(collection)

    @router.get("/{record_id}", name=f"get_{collection}")
    def get_record(record_id: str, repo: RepositoryDep):
        return repo.get(collection, record_id)

    @router.post("", status_code=create_status, dependencies=MUTATION_GUARD, name=f"create_{collection}")
    def create_record(fields: FieldsDep, repo: RepositoryDep):
        return repo.create(collection, fields.data)

    @router.put("/{record_id}", dependencies=MUTATION_GUARD, name=f"update_{collection}")
    def update_record(record_id: str, fields: FieldsDep, repo: RepositoryDep):
        return repo.update(collection, record_id, fields.data)

    @router.delete("/{record_id}", dependencies=MUTATION_GUARD, name=f"delete_{collection}")
    def delete_record(record_id: str, repo: RepositoryDep):
        if not repo.delete(collection, record_id):
            raise NotFoundError(f"{label} not found")
        return {"message": f"{label} deleted"}

    return router
