"""
Domain errors for the approval engine.

Every error is an HTTPException so services can raise it directly and the
central handler renders it with its stable ``code``.
"""
from typing import Any, Optional
from fastapi import HTTPException, status


class ApprovalEngineError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "APPROVAL_ENGINE_ERROR"
    default_detail = "Approval engine error"

    def __init__(self, detail: Optional[Any] = None):
        super().__init__(status_code=type(self).status_code, detail=detail or self.default_detail)


class InvalidRangeError(ApprovalEngineError):
    code = "INVALID_RANGE"
    default_detail = "Start date must not be after end date"


class InvalidRequestError(ApprovalEngineError):
    code = "INVALID_REQUEST"
    default_detail = "Request is missing mandatory data"


class InsufficientBalanceError(ApprovalEngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "INSUFFICIENT_BALANCE"
    default_detail = "Requested days exceed the remaining leave balance"


class InvalidAdjustmentError(ApprovalEngineError):
    code = "INVALID_ADJUSTMENT"
    default_detail = "Ledger adjustment is not allowed"


class NoApproverConfiguredError(ApprovalEngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "NO_APPROVER_CONFIGURED"
    default_detail = "No approver is configured for this request; contact HR"


class UnauthorizedApproverError(ApprovalEngineError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "UNAUTHORIZED_APPROVER"
    default_detail = "You are not the approver for the current stage"


class MissingSignatureError(ApprovalEngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "MISSING_SIGNATURE"
    default_detail = "A required signature is missing"


class ConcurrentModificationError(ApprovalEngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONCURRENT_MODIFICATION"
    default_detail = "The request was modified by someone else; reload and retry"


class TerminalStateError(ApprovalEngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "TERMINAL_STATE"
    default_detail = "The request is already approved or rejected"


class InvalidTransitionError(ApprovalEngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "INVALID_TRANSITION"
    default_detail = "Transition is not allowed from the current status"


class RequestLockedError(ApprovalEngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "REQUEST_LOCKED"
    default_detail = "Signed drafts cannot change their dates or items"


class NotFoundError(ApprovalEngineError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_detail = "Entity not found"


class ForbiddenError(ApprovalEngineError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_detail = "You are not allowed to perform this action"


class MaintenanceModeError(ApprovalEngineError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "MAINTENANCE"
    default_detail = "The service is in maintenance mode"


class DocumentRenderingError(ApprovalEngineError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "DOCUMENT_RENDERING_FAILED"
    default_detail = "The document could not be rendered"
