from campus_portal.db.collections import normalize_id

from ._crud import crud_router
from ..deps import RepositoryDep

# DELETE /exams/{id} also removes the exam's questions (declared on the questions collection)
router = crud_router("exams")


@router.get("/{exam_id}/questions")
def exam_questions(exam_id: str, repo: RepositoryDep):
    return repo.list_by("questions", "exam_id", normalize_id(exam_id))
