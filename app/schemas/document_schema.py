from typing import NamedTuple, Optional, Dict, Tuple

from fastapi import UploadFile, File


class DocumentSlot(NamedTuple):
    wire_name: str
    field_name: str
    label: str


# Ordered contract between the wizard and the upload endpoint. Renaming a slot
# has to happen on both sides.
DOCUMENT_SLOTS: Tuple[DocumentSlot, ...] = (
    DocumentSlot("memberAadhaarFront", "member_aadhaar_front", "Member Aadhaar Front"),
    DocumentSlot("memberAadhaarBack", "member_aadhaar_back", "Member Aadhaar Back"),
    DocumentSlot("nomineeAadhaarFront", "nominee_aadhaar_front", "Nominee Aadhaar Front"),
    DocumentSlot("nomineeAadhaarBack", "nominee_aadhaar_back", "Nominee Aadhaar Back"),
    DocumentSlot("panCard", "pan_card", "PAN Card"),
    DocumentSlot("formImage", "form_image", "Form Image"),
    DocumentSlot("signature", "signature", "Signature"),
    DocumentSlot("memberPhoto", "member_photo", "Member Photo"),
    DocumentSlot("passbookImage", "passbook_image", "Passbook Image"),
)

DOCUMENT_SLOT_NAMES: Tuple[str, ...] = tuple(slot.wire_name for slot in DOCUMENT_SLOTS)
SLOTS_BY_WIRE_NAME: Dict[str, DocumentSlot] = {slot.wire_name: slot for slot in DOCUMENT_SLOTS}

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}


class LoanDocumentUploadRequest:
    def __init__(
        self,
        memberAadhaarFront: Optional[UploadFile] = File(None),
        memberAadhaarBack: Optional[UploadFile] = File(None),
        nomineeAadhaarFront: Optional[UploadFile] = File(None),
        nomineeAadhaarBack: Optional[UploadFile] = File(None),
        panCard: Optional[UploadFile] = File(None),
        formImage: Optional[UploadFile] = File(None),
        signature: Optional[UploadFile] = File(None),
        memberPhoto: Optional[UploadFile] = File(None),
        passbookImage: Optional[UploadFile] = File(None),
    ):
        self._fields = {
            "memberAadhaarFront": memberAadhaarFront,
            "memberAadhaarBack": memberAadhaarBack,
            "nomineeAadhaarFront": nomineeAadhaarFront,
            "nomineeAadhaarBack": nomineeAadhaarBack,
            "panCard": panCard,
            "formImage": formImage,
            "signature": signature,
            "memberPhoto": memberPhoto,
            "passbookImage": passbookImage,
        }

    def to_dict(self) -> Dict[str, Optional[UploadFile]]:
        # Parts sent without a filename are treated as absent
        return {
            name: (file if file is not None and file.filename else None)
            for name, file in self._fields.items()
        }
