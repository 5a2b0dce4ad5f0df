"""
Pydantic schemas for API request/response models.
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from primesec.config import settings
from primesec.models.enums import (
    UserRole,
    ContainerType,
    SeverityLevel,
    IssueStatus,
    IssueClassification,
    IssueHierarchy,
    ControlStatus,
    ViolationType,
    ReviewStatus,
)


class _ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def _naive_utc(value: datetime | None) -> datetime | None:
    """Columns store naive UTC; offset-aware input is converted, naive input is taken as UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# ── Users ──

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    full_name: str = Field(..., min_length=1, max_length=100)
    role: UserRole
    is_active: bool = True


class UserFilter(BaseModel):
    role: UserRole | None = None
    is_active: bool | None = None
    limit: int = Field(settings.default_user_page_size, ge=1, le=settings.max_user_page_size)
    offset: int = Field(0, ge=0)


class UserOut(_ORMModel):
    id: int
    username: str
    email: str
    full_name: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ── Containers ──

class ContainerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    type: ContainerType
    external_id: str | None = Field(None, max_length=100)
    external_system: str | None = Field(None, max_length=50)
    created_by: int


class ContainerOut(_ORMModel):
    id: int
    name: str
    description: str | None = None
    type: ContainerType
    risk_score: float
    external_id: str | None = None
    external_system: str | None = None
    created_by: int
    created_at: datetime
    updated_at: datetime
    is_active: bool


# ── Security issues ──

class SecurityIssueCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    severity: SeverityLevel
    classification: IssueClassification
    hierarchy: IssueHierarchy
    confidentiality_impact: float = Field(0, ge=0, le=100)
    integrity_impact: float = Field(0, ge=0, le=100)
    availability_impact: float = Field(0, ge=0, le=100)
    compliance_impact: float = Field(0, ge=0, le=100)
    third_party_risk: float = Field(0, ge=0, le=100)
    mitre_attack_id: str | None = Field(None, max_length=20)
    mitre_attack_tactic: str | None = Field(None, max_length=100)
    mitre_attack_technique: str | None = Field(None, max_length=200)
    linddun_category: str | None = Field(None, max_length=50)
    attack_complexity: str | None = Field(None, max_length=20)
    threat_modeling_notes: str | None = None
    compensating_controls: str | None = None
    container_id: int
    parent_issue_id: int | None = None
    assigned_to: int | None = None
    created_by: int
    is_automated_finding: bool = False


class SecurityIssueUpdate(BaseModel):
    """Partial update: only the fields present in the payload are applied."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1)
    severity: SeverityLevel | None = None
    status: IssueStatus | None = None
    classification: IssueClassification | None = None
    confidentiality_impact: float | None = Field(None, ge=0, le=100)
    integrity_impact: float | None = Field(None, ge=0, le=100)
    availability_impact: float | None = Field(None, ge=0, le=100)
    compliance_impact: float | None = Field(None, ge=0, le=100)
    third_party_risk: float | None = Field(None, ge=0, le=100)
    mitre_attack_id: str | None = Field(None, max_length=20)
    mitre_attack_tactic: str | None = Field(None, max_length=100)
    mitre_attack_technique: str | None = Field(None, max_length=200)
    linddun_category: str | None = Field(None, max_length=50)
    attack_complexity: str | None = Field(None, max_length=20)
    threat_modeling_notes: str | None = None
    compensating_controls: str | None = None
    assigned_to: int | None = None


class SecurityIssueFilter(BaseModel):
    container_id: int | None = None
    severity: SeverityLevel | None = None
    status: IssueStatus | None = None
    classification: IssueClassification | None = None
    assigned_to: int | None = None
    is_automated_finding: bool | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None
    risk_score_min: float | None = Field(None, ge=0, le=100)
    risk_score_max: float | None = Field(None, ge=0, le=100)
    limit: int = Field(settings.default_page_size, ge=1, le=settings.max_page_size)
    offset: int = Field(0, ge=0)

    @field_validator("created_after", "created_before")
    @classmethod
    def validate_bounds(cls, v: datetime | None) -> datetime | None:
        return _naive_utc(v)


class SecurityIssueOut(_ORMModel):
    id: int
    title: str
    description: str
    severity: SeverityLevel
    status: IssueStatus
    classification: IssueClassification
    hierarchy: IssueHierarchy
    risk_score: float
    confidentiality_impact: float
    integrity_impact: float
    availability_impact: float
    compliance_impact: float
    third_party_risk: float
    mitre_attack_id: str | None = None
    mitre_attack_tactic: str | None = None
    mitre_attack_technique: str | None = None
    linddun_category: str | None = None
    attack_complexity: str | None = None
    threat_modeling_notes: str | None = None
    compensating_controls: str | None = None
    container_id: int
    parent_issue_id: int | None = None
    assigned_to: int | None = None
    created_by: int
    created_at: datetime
    updated_at: datetime
    is_automated_finding: bool


# ── Security reviews ──

class SecurityReviewCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    document_name: str | None = Field(None, max_length=255)
    document_url: str | None = Field(None, max_length=1000)
    document_type: str | None = Field(None, max_length=20)
    container_id: int | None = None
    created_by: int


class SecurityReviewStatusUpdate(BaseModel):
    status: ReviewStatus
    reviewer_id: int | None = None


class SecurityReviewFilter(BaseModel):
    container_id: int | None = None
    status: ReviewStatus | None = None
    reviewer_id: int | None = None
    ai_analysis_complete: bool | None = None
    created_by: int | None = None
    limit: int = Field(settings.default_page_size, ge=1, le=settings.max_page_size)
    offset: int = Field(0, ge=0)


class SecurityReviewOut(_ORMModel):
    id: int
    title: str
    description: str | None = None
    document_name: str | None = None
    document_url: str | None = None
    document_type: str | None = None
    status: ReviewStatus
    ai_analysis_complete: bool
    ai_analysis_results: dict | None = None
    container_id: int | None = None
    reviewer_id: int | None = None
    created_by: int
    created_at: datetime
    updated_at: datetime


# ── Document analysis payload ──

Rating = Literal["Very Low", "Low", "Medium", "High", "Very High"]


class Recommendation(BaseModel):
    title: str
    description: str
    severity: SeverityLevel
    priority: int
    implementation_effort: Literal["Low", "Medium", "High"]
    category: str


class IdentifiedRisk(BaseModel):
    risk_name: str
    description: str
    likelihood: Rating
    impact: Rating
    risk_score: float = Field(..., ge=0, le=100)
    mitigation_strategy: str


class ComplianceGap(BaseModel):
    framework: str
    control_id: str
    gap_description: str
    current_state: str
    target_state: str
    remediation_timeline: str


class ArchitectureConcern(BaseModel):
    component: str
    concern_type: Literal["Security", "Performance", "Scalability", "Reliability"]
    description: str
    recommended_action: str
    impact_assessment: str


class DocumentAnalysis(BaseModel):
    document_classification: str
    overall_security_score: float = Field(..., ge=0, le=100)
    key_findings_summary: str
    recommendations: list[Recommendation]
    risks_identified: list[IdentifiedRisk]
    compliance_gaps: list[ComplianceGap] = []
    architecture_concerns: list[ArchitectureConcern] = []
    next_steps: list[str]


# ── Security violations ──

class SecurityViolationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    violation_type: ViolationType
    severity: SeverityLevel
    incident_date: datetime
    detection_method: str | None = Field(None, max_length=200)
    affected_systems: str | None = None
    impact_assessment: str | None = None
    remediation_steps: str | None = None
    container_id: int | None = None
    related_issue_id: int | None = None
    assigned_to: int | None = None
    created_by: int

    @field_validator("incident_date")
    @classmethod
    def validate_incident_date(cls, v: datetime) -> datetime:
        return _naive_utc(v)


class SecurityViolationFilter(BaseModel):
    violation_type: ViolationType | None = None
    severity: SeverityLevel | None = None
    status: IssueStatus | None = None
    assigned_to: int | None = None
    container_id: int | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None
    incident_after: datetime | None = None
    incident_before: datetime | None = None
    order_by: Literal["created_at", "incident_date", "severity", "status"] | None = None
    limit: int = Field(settings.default_page_size, ge=1, le=settings.max_page_size)
    offset: int = Field(0, ge=0)

    @field_validator("created_after", "created_before", "incident_after", "incident_before")
    @classmethod
    def validate_bounds(cls, v: datetime | None) -> datetime | None:
        return _naive_utc(v)


class SecurityViolationOut(_ORMModel):
    id: int
    title: str
    description: str
    violation_type: ViolationType
    severity: SeverityLevel
    status: IssueStatus
    incident_date: datetime
    detection_method: str | None = None
    affected_systems: str | None = None
    impact_assessment: str | None = None
    remediation_steps: str | None = None
    container_id: int | None = None
    related_issue_id: int | None = None
    assigned_to: int | None = None
    created_by: int
    created_at: datetime
    updated_at: datetime


class SecurityViolationDetail(SecurityViolationOut):
    container_name: str | None = None
    assignee_name: str | None = None


# ── Security controls ──

class SecurityControlCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    control_type: str = Field(..., min_length=1, max_length=50)
    implementation_status: ControlStatus
    effectiveness_rating: float | None = Field(None, ge=0, le=100)
    framework_reference: str | None = Field(None, max_length=100)
    control_family: str | None = Field(None, max_length=100)
    implementation_notes: str | None = None
    testing_frequency: str | None = Field(None, max_length=50)
    last_tested: datetime | None = None
    container_id: int
    created_by: int

    @field_validator("last_tested")
    @classmethod
    def validate_last_tested(cls, v: datetime | None) -> datetime | None:
        return _naive_utc(v)


class SecurityControlFilter(BaseModel):
    implementation_status: ControlStatus | None = None
    control_type: str | None = None
    framework_reference: str | None = None
    container_id: int | None = None
    control_family: str | None = None
    is_active: bool | None = None
    limit: int = Field(settings.default_page_size, ge=1, le=settings.max_page_size)
    offset: int = Field(0, ge=0)


class SecurityControlOut(_ORMModel):
    id: int
    name: str
    description: str | None = None
    control_type: str
    implementation_status: ControlStatus
    effectiveness_rating: float | None = None
    framework_reference: str | None = None
    control_family: str | None = None
    implementation_notes: str | None = None
    testing_frequency: str | None = None
    last_tested: datetime | None = None
    container_id: int
    created_by: int
    created_at: datetime
    updated_at: datetime
    is_active: bool


# ── Architecture components ──

class ArchitectureComponentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    component_type: str = Field(..., min_length=1, max_length=50)
    description: str | None = None
    technology_stack: str | None = Field(None, max_length=200)
    security_domain: str | None = Field(None, max_length=100)
    trust_boundary: str | None = Field(None, max_length=100)
    network_zone: str | None = Field(None, max_length=100)
    data_classification: str | None = Field(None, max_length=50)
    position_x: float | None = None
    position_y: float | None = None
    container_id: int
    created_by: int


class ArchitectureComponentFilter(BaseModel):
    component_type: str | None = None
    security_domain: str | None = None
    container_id: int | None = None
    trust_boundary: str | None = None
    network_zone: str | None = None
    is_active: bool | None = None
    limit: int = Field(settings.default_page_size, ge=1, le=settings.max_page_size)
    offset: int = Field(0, ge=0)


class ArchitectureComponentOut(_ORMModel):
    id: int
    name: str
    component_type: str
    description: str | None = None
    technology_stack: str | None = None
    security_domain: str | None = None
    trust_boundary: str | None = None
    network_zone: str | None = None
    data_classification: str | None = None
    position_x: float | None = None
    position_y: float | None = None
    container_id: int
    created_by: int
    created_at: datetime
    updated_at: datetime
    is_active: bool


# ── Dashboard ──

class TopRiskContainer(BaseModel):
    container_id: int
    container_name: str
    risk_score: float
    issue_count: int


class RecentViolation(BaseModel):
    id: int
    title: str
    severity: SeverityLevel
    incident_date: datetime
    created_at: datetime


class ControlCoverage(BaseModel):
    existing: int = 0
    planned: int = 0
    not_specified: int = 0


class DashboardAnalytics(BaseModel):
    total_issues: int
    critical_issues: int
    high_issues: int
    medium_issues: int
    low_issues: int
    open_issues: int
    resolved_issues: int
    average_risk_score: float
    top_risk_containers: list[TopRiskContainer]
    recent_violations: list[RecentViolation]
    control_coverage: ControlCoverage


class RiskTrendPoint(BaseModel):
    date: str
    score: float


class TopIssue(BaseModel):
    id: int
    title: str
    risk_score: float


class ContainerRiskAnalytics(BaseModel):
    container_risk_score: float
    weighted_open_risk_score: float
    issue_breakdown: dict[str, int]
    risk_trends: list[RiskTrendPoint]
    top_issues: list[TopIssue]
