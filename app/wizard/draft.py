from typing import Any, Dict, Optional

from app.schemas.document_schema import DOCUMENT_SLOT_NAMES
from app.schemas.loan_schema import LoanFormFields, FORM_FIELD_NAMES
from app.wizard.context import MemberRef
from app.wizard.crop import CroppedImage


class LoanDraft:
    """The in-progress application: scalar form fields plus 9 document slots."""

    def __init__(self, fields: Optional[LoanFormFields] = None):
        self.fields = fields or LoanFormFields()
        self.documents: Dict[str, Optional[CroppedImage]] = {slot: None for slot in DOCUMENT_SLOT_NAMES}

    @classmethod
    def for_member(cls, member: Optional[MemberRef]) -> "LoanDraft":
        if member is None:
            return cls()
        return cls(LoanFormFields(
            memberCibil=member.cibil or "",
            personName=member.name or "",
            dateofbirth=member.date_of_birth or "",
            gender=member.gender or "",
        ))

    def get(self, name: str) -> Any:
        if name in self.documents:
            return self.documents[name]
        return getattr(self.fields, FORM_FIELD_NAMES[name])

    def set(self, name: str, value: str) -> None:
        if name not in FORM_FIELD_NAMES:
            raise KeyError(f"Unknown form field: {name}")
        setattr(self.fields, FORM_FIELD_NAMES[name], value)

    def set_document(self, slot: str, image: Optional[CroppedImage]) -> None:
        if slot not in self.documents:
            raise KeyError(f"Unknown document slot: {slot}")
        self.documents[slot] = image

    def snapshot(self) -> Dict[str, Any]:
        """Read-only view keyed by wire names, used by the step validators."""
        data: Dict[str, Any] = self.fields.to_wire()
        data.update(self.documents)
        return data
