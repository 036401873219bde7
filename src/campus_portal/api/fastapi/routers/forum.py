from ._crud import crud_router

router = crud_router("forum", create_status=201)
