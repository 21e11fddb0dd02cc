from sqlmodel import SQLModel

from leavedesk.models.audit import AuditLog
from leavedesk.models.balance import LeaveBalance
from leavedesk.models.base import TimestampMixin, UpdateTimestampMixin, UUIDBase
from leavedesk.models.department import Department
from leavedesk.models.employee import Employee
from leavedesk.models.enums import (
    AuditAction,
    AuditEntityType,
    LeaveRequestStatus,
    TitleLevel,
)
from leavedesk.models.holiday import Holiday
from leavedesk.models.leave_type import LeaveType
from leavedesk.models.request import LeaveRequest
from leavedesk.models.title import Title

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "Department",
    "Employee",
    "Holiday",
    "LeaveBalance",
    "LeaveRequest",
    "LeaveRequestStatus",
    "LeaveType",
    "SQLModel",
    "TimestampMixin",
    "Title",
    "TitleLevel",
    "UUIDBase",
    "UpdateTimestampMixin",
]
