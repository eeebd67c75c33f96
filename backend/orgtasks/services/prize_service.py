from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from prometheus_client import Counter

from ..db import models
from ..domain.enums import PrizeStatus
from ..domain.workflows import PrizeAction, get_next_prize_status, is_prize_transition_allowed
from .authorization import CallerContext, require

logger = logging.getLogger(__name__)

PRIZE_TRANSITIONS = Counter(
    "orgtasks_prize_transitions_total", "Prize status transition attempts", ["outcome"]
)

class PrizeNotFound(Exception):
    pass

class PrizeService:
    """CRUD for prizes plus the admin-driven redemption cycle."""

    def get_prize(self, db: Session, prize_id: int) -> models.Prize:
        prize = db.query(models.Prize).filter(models.Prize.id == prize_id).first()
        if not prize:
            raise PrizeNotFound()
        return prize

    def list_for_department(self, db: Session, department_id: int) -> List[models.Prize]:
        return (
            db.query(models.Prize)
            .filter(models.Prize.department_id == department_id)
            .order_by(models.Prize.id)
            .all()
        )

    def save_prize(self, db: Session, prize_id: Optional[int] = None, **fields) -> models.Prize:
        if "status" in fields and fields["status"] is not None:
            fields["status"] = PrizeStatus(fields["status"]).value
        if prize_id is None:
            prize = models.Prize(**fields)
            db.add(prize)
        else:
            prize = self.get_prize(db, prize_id)
            for key, value in fields.items():
                setattr(prize, key, value)
        db.commit()
        db.refresh(prize)
        return prize

    def delete_prize(self, db: Session, prize: models.Prize) -> None:
        db.delete(prize)
        db.commit()

    def next_action(self, caller: CallerContext, department: models.Department, prize: models.Prize) -> PrizeAction:
        return get_next_prize_status(PrizeStatus(prize.status), caller.roles_for_department(department))

    def advance(
        self,
        db: Session,
        caller: CallerContext,
        department: models.Department,
        prize: models.Prize,
        assigned_user_id: Optional[str] = None,
    ) -> models.Prize:
        """Apply the next step of the cycle; denied callers get ``ForbiddenError``."""
        current = PrizeStatus(prize.status)
        action = self.next_action(caller, department, prize)
        allowed = is_prize_transition_allowed(action, current)
        PRIZE_TRANSITIONS.labels(outcome="applied" if allowed else "denied").inc()
        require(allowed, caller, action.label)

        prize.status = action.next_status.value
        if current == PrizeStatus.AVAILABLE and assigned_user_id:
            prize.assigned_user_id = assigned_user_id
        elif action.next_status == PrizeStatus.AVAILABLE:
            prize.assigned_user_id = None
        db.commit()
        db.refresh(prize)
        logger.info("prize %s %s -> %s by user %s", prize.id, current.value, prize.status, caller.user_id)
        return prize
