from app.wizard.context import WizardContext, SessionUser, CenterRef, MemberRef
from app.wizard.crop import CropRegion, CroppedImage, CropSession, crop_image
from app.wizard.draft import LoanDraft
from app.wizard.errors import ErrorCategory, ApiError, Notification, MissingContextError, WizardBusyError
from app.wizard.state_machine import LoanApplicationWizard, WizardState
from app.wizard.client import LoanApiClient
