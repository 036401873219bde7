from ._crud import crud_router
from ..deps import RepositoryDep

router = crud_router("calendar", create_status=201)


@router.get("/date/{date}")
def events_on_date(date: str, repo: RepositoryDep):
    """Events whose ``date`` equals the path segment exactly (``yyyy-MM-dd``)."""
    return repo.list_by("calendar", "date", date)
