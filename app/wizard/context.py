from dataclasses import dataclass
from typing import Any, Mapping, Optional

from app.wizard.errors import MissingContextError


@dataclass(frozen=True)
class SessionUser:
    id: str
    name: str = ""
    email: str = ""
    is_admin: bool = False


@dataclass(frozen=True)
class CenterRef:
    id: str
    name: str = ""


@dataclass(frozen=True)
class MemberRef:
    id: str
    name: str = ""
    cibil: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "MemberRef":
        return cls(
            id=str(data.get("id") or data.get("_id")),
            name=data.get("name") or "",
            cibil=data.get("cibil"),
            date_of_birth=data.get("date_of_birth"),
            gender=data.get("gender"),
        )


@dataclass(frozen=True)
class WizardContext:
    """Who is filling in the application, and for which center and member."""
    user: Optional[SessionUser]
    center: Optional[CenterRef]
    member: Optional[MemberRef]

    def require_selection(self) -> None:
        if self.center is None or self.member is None:
            raise MissingContextError("Please select a center and member first.")

    def require_user(self) -> SessionUser:
        if self.user is None:
            raise MissingContextError("Login required")
        return self.user
