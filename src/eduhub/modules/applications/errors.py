"""Application service errors, shared by the wizard, uploads and persistence."""


class ApplicationServiceError(Exception):
    """Base exception for application operations"""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class StepValidationError(ApplicationServiceError):
    """Raised when the current wizard step has blocking field errors"""

    def __init__(self, step: int, errors: dict[str, str]):
        self.step = step
        self.errors = errors
        super().__init__(
            message=f"Step {step} has {len(errors)} field error(s)",
            error_code="STEP_INVALID",
            status_code=422,
        )


class UploadError(ApplicationServiceError):
    """Raised when an upload is rejected; scoped to one upload slot"""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message=message, error_code="UPLOAD_REJECTED", status_code=400)


class WizardStateError(ApplicationServiceError):
    """Raised when an action is not allowed in the wizard's current state"""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="WIZARD_STATE", status_code=409)


class InvalidFormDataError(ApplicationServiceError):
    """Raised when an edit would break the form's structural rules"""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message=message, error_code="INVALID_FORM_DATA", status_code=422)
