"""
Database models
"""
from approval_engine.models.department import Department
from approval_engine.models.employee import Employee, Role
from approval_engine.models.audit_log import AuditLog
from approval_engine.models.holiday import Holiday, HolidayKind
from approval_engine.models.request import (
    Request,
    ProcurementItem,
    RequestSignature,
    RequestApproval,
    RequestNote,
    RequestVariant,
    RequestStatus,
    SignatureRole,
    ApprovalAction,
    TERMINAL_STATUSES,
)
from approval_engine.models.leave import LeaveBalance, LeaveTransaction, LeaveTransactionAction
from approval_engine.models.approval import ApprovalAssignment, ApprovalDelegation
from approval_engine.models.notification import Notification, NotificationKind

__all__ = [
    "Department",
    "Employee",
    "Role",
    "AuditLog",
    "Holiday",
    "HolidayKind",
    "Request",
    "ProcurementItem",
    "RequestSignature",
    "RequestApproval",
    "RequestNote",
    "RequestVariant",
    "RequestStatus",
    "SignatureRole",
    "ApprovalAction",
    "TERMINAL_STATUSES",
    "LeaveBalance",
    "LeaveTransaction",
    "LeaveTransactionAction",
    "ApprovalAssignment",
    "ApprovalDelegation",
    "Notification",
    "NotificationKind",
]
