"""Points earned from verified tasks and the department leaderboard."""
from typing import List, Optional

from sqlalchemy.orm import Session

from ..repositories.task_repository import PointsAwardedRow, SqlAlchemyTaskRepository, TaskRepository

DEFAULT_TOP_COUNT = 5


def points_by_department(db: Session, department_id: int, repository: Optional[TaskRepository] = None) -> List[PointsAwardedRow]:
    repo = repository or SqlAlchemyTaskRepository()
    return repo.list_points_awarded_by_department(db, department_id)


def points_by_user(db: Session, user_id: str, repository: Optional[TaskRepository] = None) -> List[PointsAwardedRow]:
    repo = repository or SqlAlchemyTaskRepository()
    return repo.list_points_awarded_by_user(db, user_id)


def total_points(db: Session, user_id: str, repository: Optional[TaskRepository] = None) -> int:
    return sum(row.task_points_awarded for row in points_by_user(db, user_id, repository))


def top_users(
    db: Session,
    user_id: str,
    department_id: int,
    top_count: int = DEFAULT_TOP_COUNT,
    repository: Optional[TaskRepository] = None,
) -> List[PointsAwardedRow]:
    """Top ``top_count`` users by points; the caller is appended when ranked lower."""
    repo = repository or SqlAlchemyTaskRepository()
    ranked = repo.rank_users_by_points(db, department_id)
    top = ranked[:top_count]
    caller_row = next((row for row in ranked if row.user_id == user_id), None)
    if caller_row is not None and caller_row.user_ranking > top_count:
        top.append(caller_row)
    return top
