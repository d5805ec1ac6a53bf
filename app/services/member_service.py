import logging
import re
from datetime import datetime
from typing import Dict, List

from beanie.operators import In, RegEx
from fastapi import HTTPException, status

from app.database.models import Loan, Member
from app.helpers.response_builder import build_member_response, parse_object_id
from app.schemas import MemberCreate
from app.services.center_service import center_service
from app.utils.form_inputs import capitalize_words

logger = logging.getLogger(__name__)


class MemberService:

    # Adds a member to one of the user's centers; names are unique per center
    async def create_member(self, member_data: MemberCreate, user_id: str) -> Dict:
        center = await center_service.get_owned_center(member_data.center_id, user_id)
        center_id = str(center.id)

        name = capitalize_words(member_data.name)
        if not name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Member name required")

        existing = await Member.find_one(
            Member.center_id == center_id,
            RegEx(Member.name, f"^{re.escape(name)}$", "i"),
        )
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Member already exists in this center")

        member = Member(
            name=name,
            center_id=center_id,
            cibil=member_data.cibil,
            date_of_birth=member_data.date_of_birth,
            gender=member_data.gender,
            created_at=datetime.utcnow(),
        )
        await member.insert()
        logger.info(f"Created member {member.id} in center {center_id}")
        return build_member_response(member)

    # Lists the members of a center, flagging the ones that already have a loan
    async def list_members(self, center_id: str, user_id: str, allow_any: bool = False) -> List[Dict]:
        center = await center_service.get_owned_center(center_id, user_id, allow_any=allow_any)
        members = await Member.find(Member.center_id == str(center.id)).sort(+Member.name).to_list()
        if not members:
            return []

        member_ids = [str(m.id) for m in members]
        loans = await Loan.find(In(Loan.member_id, member_ids)).to_list()
        submitted = {loan.member_id for loan in loans}
        return [build_member_response(m, loan_submitted=str(m.id) in submitted) for m in members]

    # Resolves the center/member pair a loan is submitted for
    async def get_center_member(self, center_id: str, member_id: str, user_id: str, allow_any: bool = False) -> Member:
        center = await center_service.get_owned_center(center_id, user_id, allow_any=allow_any)
        object_id = parse_object_id(member_id)
        member = await Member.get(object_id) if object_id else None
        if not member or member.center_id != str(center.id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found in this center")
        return member


member_service = MemberService()


def get_member_service() -> MemberService:
    return member_service
