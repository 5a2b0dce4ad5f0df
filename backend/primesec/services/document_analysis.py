"""
Document Analysis

Produces the structured analysis stored on a security review. There is no
document parsing or model inference: a keyword classifier over the review's
title and document type picks one of two template analyses, which are
filled in with the review's own metadata.
"""

from primesec.models import SecurityReview
from primesec.schemas.schemas import (
    ArchitectureConcern,
    ComplianceGap,
    DocumentAnalysis,
    IdentifiedRisk,
    Recommendation,
)

ARCHITECTURE_REVIEW = "Architecture Review"
GENERAL = "General"

_ARCHITECTURE_KEYWORDS = ["architecture"]


def _matches_any(text: str, patterns: list[str]) -> bool:
    return any(p in text for p in patterns)


def classify_document(title: str, document_type: str | None) -> str:
    text = f"{title} {document_type or ''}".lower()
    if _matches_any(text, _ARCHITECTURE_KEYWORDS):
        return ARCHITECTURE_REVIEW
    return GENERAL


def _document_label(review: SecurityReview) -> str:
    if review.document_name:
        return f"'{review.document_name}'"
    return f"review '{review.title}'"


def _architecture_analysis(review: SecurityReview) -> DocumentAnalysis:
    label = _document_label(review)
    return DocumentAnalysis(
        document_classification=ARCHITECTURE_REVIEW,
        overall_security_score=72,
        key_findings_summary=(
            f"Architecture analysis of {label}: trust boundaries are mostly defined, "
            "but service-to-service authentication and data-at-rest encryption need work."
        ),
        recommendations=[
            Recommendation(
                title="Enforce mutual TLS between internal services",
                description="Internal API traffic crosses network zones without mutual authentication.",
                severity="High",
                priority=1,
                implementation_effort="Medium",
                category="Network Security",
            ),
            Recommendation(
                title="Encrypt sensitive data stores at rest",
                description="Databases holding confidential data do not document encryption at rest.",
                severity="High",
                priority=2,
                implementation_effort="Low",
                category="Data Protection",
            ),
            Recommendation(
                title="Centralize secrets management",
                description="Service credentials are distributed through configuration files.",
                severity="Medium",
                priority=3,
                implementation_effort="Medium",
                category="Identity and Access",
            ),
        ],
        risks_identified=[
            IdentifiedRisk(
                risk_name="Lateral movement between services",
                description="A compromised service can call peers without presenting credentials.",
                likelihood="Medium",
                impact="High",
                risk_score=70,
                mitigation_strategy="Introduce service identities and mutual TLS at the mesh layer.",
            ),
            IdentifiedRisk(
                risk_name="Exposure of data at rest",
                description="Storage snapshots could disclose confidential records.",
                likelihood="Low",
                impact="Very High",
                risk_score=60,
                mitigation_strategy="Enable storage encryption with managed keys and rotate them.",
            ),
        ],
        compliance_gaps=[
            ComplianceGap(
                framework="NIST 800-53",
                control_id="SC-8",
                gap_description="Transmission confidentiality is not enforced for internal traffic.",
                current_state="TLS terminates at the edge gateway only",
                target_state="All service-to-service traffic encrypted and authenticated",
                remediation_timeline="90 days",
            ),
            ComplianceGap(
                framework="ISO 27001",
                control_id="A.10.1.1",
                gap_description="No documented policy on the use of cryptographic controls.",
                current_state="Encryption decisions made per team",
                target_state="Organisation-wide cryptography policy applied to all stores",
                remediation_timeline="60 days",
            ),
        ],
        architecture_concerns=[
            ArchitectureConcern(
                component="API Gateway",
                concern_type="Security",
                description="Gateway is the single enforcement point for authentication.",
                recommended_action="Add authorization checks inside downstream services.",
                impact_assessment="A gateway bypass would expose every internal endpoint.",
            ),
            ArchitectureConcern(
                component="Primary Database",
                concern_type="Reliability",
                description="Single database instance without a documented failover plan.",
                recommended_action="Deploy a standby replica and rehearse failover.",
                impact_assessment="An outage would halt all write paths.",
            ),
        ],
        next_steps=[
            "Schedule a threat-modeling session for the internal service mesh",
            "Assign owners to each high-severity recommendation",
            "Re-run the review after remediation of compliance gaps",
        ],
    )


def _general_analysis(review: SecurityReview) -> DocumentAnalysis:
    label = _document_label(review)
    return DocumentAnalysis(
        document_classification=GENERAL,
        overall_security_score=65,
        key_findings_summary=(
            f"General security analysis of {label}: baseline controls are described, "
            "but access reviews and incident response are not covered."
        ),
        recommendations=[
            Recommendation(
                title="Define periodic access reviews",
                description="The document does not describe how access rights are reviewed.",
                severity="Medium",
                priority=1,
                implementation_effort="Low",
                category="Access Control",
            ),
            Recommendation(
                title="Document the incident response procedure",
                description="Escalation paths and contacts for security incidents are missing.",
                severity="Medium",
                priority=2,
                implementation_effort="Medium",
                category="Incident Response",
            ),
        ],
        risks_identified=[
            IdentifiedRisk(
                risk_name="Stale access rights",
                description="Accounts of departed staff may retain access.",
                likelihood="Medium",
                impact="Medium",
                risk_score=50,
                mitigation_strategy="Run quarterly access recertification.",
            ),
        ],
        next_steps=[
            "Share findings with the document owner",
            "Track recommendations as security issues in the container",
        ],
    )


def analyze_review_document(review: SecurityReview) -> DocumentAnalysis:
    """Classify the review's document and build its analysis."""
    if classify_document(review.title, review.document_type) == ARCHITECTURE_REVIEW:
        return _architecture_analysis(review)
    return _general_analysis(review)
