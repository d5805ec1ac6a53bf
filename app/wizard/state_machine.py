import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.core.config import settings
from app.schemas.document_schema import SLOTS_BY_WIRE_NAME
from app.utils.form_inputs import accept_input, format_aadhaar
from app.utils.step_validators import FormStep, validate_all, validate_step
from app.wizard.context import WizardContext
from app.wizard.crop import CropSession, Size
from app.wizard.draft import LoanDraft
from app.wizard.errors import (
    ApiError,
    CropNotConfirmedError,
    ErrorCategory,
    ImageDecodeError,
    InvalidTransitionError,
    Notification,
    WizardBusyError,
)

logger = logging.getLogger(__name__)


class WizardState(str, Enum):
    STEP1 = "step1"
    STEP2 = "step2"
    STEP3 = "step3"
    STEP4 = "step4"
    SUBMITTING = "submitting"
    SUBMIT_SUCCEEDED = "submit_succeeded"
    SUBMIT_FAILED = "submit_failed"


STEP_STATES = {
    FormStep.IDENTITY: WizardState.STEP1,
    FormStep.NOMINEE: WizardState.STEP2,
    FormStep.CONTACT: WizardState.STEP3,
    FormStep.DOCUMENTS: WizardState.STEP4,
}
EDITABLE_STATES = frozenset(STEP_STATES.values())


class LoanApplicationWizard:
    """Four-step loan application for one member of one center.

    Steps only move forward when the current step validates. Documents are
    captured on the last step through a crop sub-state, and the whole draft
    is sent in one multipart request by `submit`. Only one mutating
    operation runs at a time; calls made while a crop render or a submission
    is pending raise `WizardBusyError`.
    """

    def __init__(
        self,
        context: WizardContext,
        api_client,
        on_navigate: Optional[Callable[[str], None]] = None,
        success_display_delay: Optional[float] = None,
        navigate_to: str = "/members",
    ):
        context.require_selection()
        self.context = context
        self.api_client = api_client
        self.on_navigate = on_navigate
        self.navigate_to = navigate_to
        self.success_display_delay = (
            settings.SUCCESS_REDIRECT_DELAY_SECONDS if success_display_delay is None else success_display_delay
        )

        self.draft = LoanDraft.for_member(context.member)
        self.step = FormStep.IDENTITY
        self.state = WizardState.STEP1
        self.history: List[WizardState] = [self.state]
        self.errors: Dict[str, str] = {}
        self.notification: Optional[Notification] = None
        self.loan_id: Optional[str] = None

        self._crop: Optional[Tuple[str, CropSession]] = None
        self._busy = False
        self._redirect_handle: Optional[asyncio.TimerHandle] = None

    # ---------------- state ----------------

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def can_submit(self) -> bool:
        return self.state == WizardState.STEP4 and not self._busy and self._crop is None

    @property
    def crop_session(self) -> Optional[CropSession]:
        return self._crop[1] if self._crop else None

    @property
    def crop_slot(self) -> Optional[str]:
        return self._crop[0] if self._crop else None

    @property
    def aadhaar_display(self) -> str:
        return format_aadhaar(self.draft.get("aadharNo"))

    def _enter(self, state: WizardState) -> None:
        self.state = state
        self.history.append(state)
        logger.debug(f"Wizard entered {state.value}")

    def _ensure_idle(self) -> None:
        if self._busy:
            raise WizardBusyError("Another operation is still in progress")

    def _ensure_editable(self) -> None:
        self._ensure_idle()
        if self.state not in EDITABLE_STATES:
            raise InvalidTransitionError(f"Form cannot be edited in state {self.state.value}")

    # ---------------- field entry ----------------

    def set_field(self, name: str, value: str) -> bool:
        """Apply a keystroke-level edit. Returns False when the input is rejected."""
        self._ensure_editable()
        accepted = accept_input(name, value)
        if accepted is None:
            return False
        self.draft.set(name, accepted)
        return True

    # ---------------- navigation ----------------

    def validate_current_step(self) -> Dict[str, str]:
        return validate_step(self.step, self.draft.snapshot())

    def next(self) -> bool:
        self._ensure_editable()
        self.errors = self.validate_current_step()
        if self.errors:
            return False
        if self.step < FormStep.DOCUMENTS:
            self.step = FormStep(self.step + 1)
            self._enter(STEP_STATES[self.step])
        return True

    def previous(self) -> bool:
        self._ensure_editable()
        if self.step == FormStep.IDENTITY:
            return False
        self.cancel_crop()
        self.step = FormStep(self.step - 1)
        self._enter(STEP_STATES[self.step])
        return True

    # ---------------- documents ----------------

    def select_file(
        self,
        slot: str,
        data: bytes,
        displayed_size: Optional[Size] = None,
        filename: Optional[str] = None,
    ) -> Optional[CropSession]:
        self._ensure_editable()
        if self.state != WizardState.STEP4:
            raise InvalidTransitionError("Documents are captured on the last step")
        if slot not in SLOTS_BY_WIRE_NAME:
            raise KeyError(f"Unknown document slot: {slot}")

        try:
            session = CropSession(data, displayed_size=displayed_size, filename=filename)
        except ImageDecodeError as e:
            logger.warning(f"Unreadable image selected for {slot}: {e}")
            self.errors[slot] = "Could not read image"
            return None

        self._crop = (slot, session)
        return session

    def _session(self) -> CropSession:
        self._ensure_idle()
        if self._crop is None:
            raise InvalidTransitionError("No image is being cropped")
        return self._crop[1]

    def set_crop_region(self, x: float, y: float, width: float, height: float) -> None:
        self._session().set_region(x, y, width, height)

    def rotate_left(self) -> int:
        return self._session().rotate_left()

    def rotate_right(self) -> int:
        return self._session().rotate_right()

    async def confirm_crop(self) -> bool:
        session = self._session()
        slot = self._crop[0]
        if session.region is None:
            self.notification = Notification(CropNotConfirmedError().message, ErrorCategory.VALIDATION)
            return False

        self._busy = True
        try:
            image = await asyncio.to_thread(session.render)
        finally:
            self._busy = False

        self.draft.set_document(slot, image)
        self.errors.pop(slot, None)
        self._crop = None
        logger.info(f"Captured {slot} ({image.width}x{image.height})")
        return True

    def cancel_crop(self) -> None:
        self._ensure_idle()
        self._crop = None

    # ---------------- submission ----------------

    async def submit(self) -> Optional[str]:
        """Send the draft. Returns the loan id, or None when nothing was created."""
        self._ensure_idle()
        if self.state != WizardState.STEP4:
            raise InvalidTransitionError("Submit is only available on the documents step")
        if self._crop is not None:
            raise InvalidTransitionError("Finish or cancel the crop before submitting")

        snapshot = self.draft.snapshot()
        self.errors = validate_all(snapshot)
        if self.errors:
            # Resume at the first step that fails
            first_failing = next(step for step in FormStep if validate_step(step, snapshot))
            if first_failing != self.step:
                self.step = first_failing
                self._enter(STEP_STATES[first_failing])
            return None
        self.context.require_user()

        self._busy = True
        self.notification = None
        self._enter(WizardState.SUBMITTING)
        try:
            loan_id = await self.api_client.create_loan(self.draft, self.context)
        except ApiError as e:
            self._submit_failed(e)
            return None
        except Exception as e:
            logger.exception("Unexpected error while submitting loan")
            self._submit_failed(ApiError(ErrorCategory.TRANSIENT, "Unexpected error, please try again", detail=str(e)))
            return None
        finally:
            self._busy = False

        self.loan_id = loan_id
        self._enter(WizardState.SUBMIT_SUCCEEDED)
        self.draft = LoanDraft.for_member(self.context.member)
        self.step = FormStep.IDENTITY
        self.errors = {}
        logger.info(f"Loan submitted with id {loan_id}")
        self._schedule_navigation()
        return loan_id

    def _submit_failed(self, error: ApiError) -> None:
        logger.warning(f"Loan submission failed ({error.category.value}): {error.message}")
        self._enter(WizardState.SUBMIT_FAILED)

        field_errors = {}
        if isinstance(error.detail, dict):
            field_errors = dict(error.detail.get("errors") or {})
        if field_errors:
            self.errors = field_errors

        fatal = error.category == ErrorCategory.FATAL
        self.notification = Notification(
            message=error.message if fatal else f"Loan submit failed: {error.message}",
            category=error.category,
            fatal=fatal,
            field_errors=field_errors,
        )
        if not fatal:
            # Draft is untouched, the user can retry from the last step
            self._enter(WizardState.STEP4)

    def dismiss_notification(self) -> None:
        if self.notification and not self.notification.fatal:
            self.notification = None

    def _schedule_navigation(self) -> None:
        if self.on_navigate is None:
            return
        loop = asyncio.get_running_loop()
        self._redirect_handle = loop.call_later(self.success_display_delay, self.on_navigate, self.navigate_to)

    # ---------------- persistence ----------------

    def export_state(self) -> Dict[str, Any]:
        """Snapshot for resuming later. Document images are not included."""
        return {
            "step": int(self.step),
            "center_id": self.context.center.id,
            "member_id": self.context.member.id,
            "fields": self.draft.fields.to_wire(),
        }

    def restore_state(self, data: Dict[str, Any]) -> None:
        self._ensure_editable()
        if data.get("member_id") not in (None, self.context.member.id):
            raise InvalidTransitionError("Saved draft belongs to a different member")
        for name, value in (data.get("fields") or {}).items():
            self.draft.set(name, value or "")
        step = FormStep(int(data.get("step", FormStep.IDENTITY)))
        # Only resume as far as the saved data actually validates
        self.step = FormStep.IDENTITY
        while self.step < step and not validate_step(self.step, self.draft.snapshot()):
            self.step = FormStep(self.step + 1)
        self._enter(STEP_STATES[self.step])
