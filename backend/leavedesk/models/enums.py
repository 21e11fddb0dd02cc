from __future__ import annotations

import enum


class LeaveRequestStatus(enum.StrEnum):
    """State machine for leave requests (department manager, then HR manager)."""

    PENDING = "PENDING"
    APPROVED_BY_DEPARTMENT_MANAGER = "APPROVED_BY_DEPARTMENT_MANAGER"
    APPROVED_BY_HR_MANAGER = "APPROVED_BY_HR_MANAGER"
    REJECTED_BY_DEPARTMENT_MANAGER = "REJECTED_BY_DEPARTMENT_MANAGER"
    REJECTED_BY_HR_MANAGER = "REJECTED_BY_HR_MANAGER"
    CANCELLED = "CANCELLED"


# No transition leaves these states.
TERMINAL_STATUSES = frozenset(
    {
        LeaveRequestStatus.APPROVED_BY_HR_MANAGER,
        LeaveRequestStatus.REJECTED_BY_DEPARTMENT_MANAGER,
        LeaveRequestStatus.REJECTED_BY_HR_MANAGER,
        LeaveRequestStatus.CANCELLED,
    }
)

# Requests in these states no longer occupy their date range.
RELEASED_STATUSES = frozenset(
    {
        LeaveRequestStatus.REJECTED_BY_DEPARTMENT_MANAGER,
        LeaveRequestStatus.REJECTED_BY_HR_MANAGER,
        LeaveRequestStatus.CANCELLED,
    }
)

CANCELLABLE_STATUSES = frozenset(
    {
        LeaveRequestStatus.PENDING,
        LeaveRequestStatus.APPROVED_BY_DEPARTMENT_MANAGER,
    }
)

DEPARTMENT_DECISIONS = frozenset(
    {
        LeaveRequestStatus.APPROVED_BY_DEPARTMENT_MANAGER,
        LeaveRequestStatus.REJECTED_BY_DEPARTMENT_MANAGER,
    }
)

HR_DECISIONS = frozenset(
    {
        LeaveRequestStatus.APPROVED_BY_HR_MANAGER,
        LeaveRequestStatus.REJECTED_BY_HR_MANAGER,
    }
)


class TitleLevel(enum.StrEnum):
    """Seniority class of a job title."""

    STAFF = "STAFF"
    MANAGER = "MANAGER"
    DIRECTOR = "DIRECTOR"


# Titles at these levels carry approval authority.
MANAGER_CLASS_LEVELS = frozenset({TitleLevel.MANAGER, TitleLevel.DIRECTOR})


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    DEPARTMENT = "DEPARTMENT"
    TITLE = "TITLE"
    EMPLOYEE = "EMPLOYEE"
    LEAVE_TYPE = "LEAVE_TYPE"
    LEAVE_BALANCE = "LEAVE_BALANCE"
    LEAVE_REQUEST = "LEAVE_REQUEST"
    HOLIDAY = "HOLIDAY"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ACTIVATE = "ACTIVATE"
    DEACTIVATE = "DEACTIVATE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
    SUBMIT = "SUBMIT"
    IMPORT = "IMPORT"
