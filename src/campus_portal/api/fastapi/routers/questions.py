from ._crud import crud_router

# listed per exam via GET /exams/{id}/questions
router = crud_router("questions", list_route=False)
