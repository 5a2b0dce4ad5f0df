"""
Categorical values shared by the ORM models and the API schemas.

Columns store the enum ``value`` as a plain string, so the database never
needs native enum types.
"""

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "Admin"
    SECURITY_ANALYST = "SecurityAnalyst"
    SECURITY_MANAGER = "SecurityManager"
    VIEWER = "Viewer"


class ContainerType(str, Enum):
    PROJECT = "Project"
    APPLICATION = "Application"
    SYSTEM = "System"
    SERVICE = "Service"


class SeverityLevel(str, Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class IssueStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In-progress"
    CLOSED = "Closed"
    RESOLVED = "Resolved"


class IssueClassification(str, Enum):
    VULNERABILITY = "Vulnerability"
    MISCONFIGURATION = "Misconfiguration"
    WEAKNESS = "Weakness"
    EXPOSURE = "Exposure"


class IssueHierarchy(str, Enum):
    EPIC = "Epic"
    STORY = "Story"
    TASK = "Task"


class ControlStatus(str, Enum):
    EXISTING = "Existing"
    PLANNED = "Planned"
    NOT_SPECIFIED = "NotSpecified"


class ViolationType(str, Enum):
    SECURITY_BREACH = "SecurityBreach"
    POLICY_VIOLATION = "PolicyViolation"
    COMPLIANCE_ISSUE = "ComplianceIssue"
    DATA_LEAK = "DataLeak"


class ReviewStatus(str, Enum):
    PENDING = "Pending"
    IN_REVIEW = "InReview"
    COMPLETED = "Completed"
    REJECTED = "Rejected"


# Rank used for ordering; lower sorts first (Critical > High > Medium > Low).
SEVERITY_RANK: dict[str, int] = {
    SeverityLevel.CRITICAL.value: 1,
    SeverityLevel.HIGH.value: 2,
    SeverityLevel.MEDIUM.value: 3,
    SeverityLevel.LOW.value: 4,
}

# Declaration order of the hierarchy levels: Epic < Story < Task.
HIERARCHY_RANK: dict[str, int] = {
    IssueHierarchy.EPIC.value: 0,
    IssueHierarchy.STORY.value: 1,
    IssueHierarchy.TASK.value: 2,
}

ACTIVE_STATUSES = (IssueStatus.OPEN.value, IssueStatus.IN_PROGRESS.value)
RESOLVED_STATUSES = (IssueStatus.CLOSED.value, IssueStatus.RESOLVED.value)
