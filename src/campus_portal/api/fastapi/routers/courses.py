from ._crud import crud_router

router = crud_router("courses")
