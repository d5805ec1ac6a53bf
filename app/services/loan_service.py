import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from beanie.operators import Or, RegEx
from fastapi import HTTPException, status

from app.database.models import Loan
from app.helpers.response_builder import parse_object_id
from app.schemas.loan_schema import ALLOWED_STATUS_TRANSITIONS, LoanStatusEnum

logger = logging.getLogger(__name__)


def check_status_transition(current: LoanStatusEnum, new: LoanStatusEnum) -> bool:
    """Return True when `new` is a legal next status for `current`.

    Setting the status a loan already has is a no-op and returns False.
    Anything else that is not an allowed transition raises 409.
    """
    current = LoanStatusEnum(current)
    new = LoanStatusEnum(new)
    if current == new:
        return False
    if new not in ALLOWED_STATUS_TRANSITIONS[current]:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot change loan status from {current.value} to {new.value}",
        )
    return True


class LoanService:
    """Record store for submitted loans."""

    # Inserts a fully assembled record; the unique index on loan_id rejects reuse
    async def create_loan(self, record: Dict[str, Any]) -> Loan:
        loan = Loan(**record)
        await loan.insert()
        logger.info(f"Inserted loan {loan.loan_id} ({loan.id})")
        return loan

    async def list_loans(
        self,
        search: Optional[str] = None,
        status_filter: Optional[LoanStatusEnum] = None,
        user_id: Optional[str] = None,
    ) -> List[Loan]:
        criteria = []
        if user_id:
            criteria.append(Loan.user_id == user_id)
        if status_filter:
            criteria.append(Loan.status == LoanStatusEnum(status_filter))
        if search and search.strip():
            pattern = re.escape(search.strip())
            criteria.append(Or(
                RegEx(Loan.person_name, pattern, "i"),
                RegEx(Loan.loan_id, pattern, "i"),
                RegEx(Loan.mobile_no, pattern),
            ))

        return await Loan.find(*criteria).sort(-Loan.created_at).to_list()

    async def get_loan(self, loan_id: str) -> Loan:
        object_id = parse_object_id(loan_id)
        loan = await Loan.get(object_id) if object_id else None
        if not loan:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Loan not found")
        return loan

    async def update_status(self, loan_id: str, new_status: LoanStatusEnum) -> Loan:
        loan = await self.get_loan(loan_id)
        if not check_status_transition(loan.status, new_status):
            return loan

        previous = loan.status
        loan.status = LoanStatusEnum(new_status)
        loan.updated_at = datetime.utcnow()
        await loan.save()
        logger.info(f"Loan {loan.loan_id} moved from {LoanStatusEnum(previous).value} to {loan.status.value}")
        return loan

    async def delete_loan(self, loan_id: str) -> Loan:
        loan = await self.get_loan(loan_id)
        await loan.delete()
        logger.info(f"Deleted loan {loan.loan_id}")
        return loan

    # Number of PENDING loans per submitting user
    async def pending_counts(self) -> Dict[str, int]:
        rows = await Loan.find(Loan.status == LoanStatusEnum.pending).aggregate(
            [{"$group": {"_id": "$user_id", "count": {"$sum": 1}}}]
        ).to_list()
        return {str(row["_id"]): row["count"] for row in rows if row.get("_id")}


loan_service = LoanService()


def get_loan_service() -> LoanService:
    return loan_service
