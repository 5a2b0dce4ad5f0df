"""Create security posture tables

Revision ID: e1a2b3c4d5f6
Revises:
Create Date: 2026-10-17 09:00:00.000000

Creates users, containers, security issues, reviews, violations, controls
and architecture components. Categorical columns are plain strings.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "e1a2b3c4d5f6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "containers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("risk_score", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("external_id", sa.String(100), nullable=True),
        sa.Column("external_system", sa.String(50), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_containers_created_by", "containers", ["created_by"])
    op.create_index("ix_containers_is_active", "containers", ["is_active"])

    op.create_table(
        "security_issues",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("severity", sa.String(10), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="Open"),
        sa.Column("classification", sa.String(20), nullable=False),
        sa.Column("hierarchy", sa.String(10), nullable=False),
        sa.Column("risk_score", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("confidentiality_impact", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("integrity_impact", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("availability_impact", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("compliance_impact", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("third_party_risk", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("mitre_attack_id", sa.String(20), nullable=True),
        sa.Column("mitre_attack_tactic", sa.String(100), nullable=True),
        sa.Column("mitre_attack_technique", sa.String(200), nullable=True),
        sa.Column("linddun_category", sa.String(50), nullable=True),
        sa.Column("attack_complexity", sa.String(20), nullable=True),
        sa.Column("threat_modeling_notes", sa.Text(), nullable=True),
        sa.Column("compensating_controls", sa.Text(), nullable=True),
        sa.Column("container_id", sa.Integer(), sa.ForeignKey("containers.id"), nullable=False),
        sa.Column("parent_issue_id", sa.Integer(), sa.ForeignKey("security_issues.id"), nullable=True),
        sa.Column("assigned_to", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
        sa.Column("is_automated_finding", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.create_index("ix_security_issues_severity", "security_issues", ["severity"])
    op.create_index("ix_security_issues_status", "security_issues", ["status"])
    op.create_index("ix_security_issues_classification", "security_issues", ["classification"])
    op.create_index("ix_security_issues_risk_score", "security_issues", ["risk_score"])
    op.create_index("ix_security_issues_container_id", "security_issues", ["container_id"])
    op.create_index("ix_security_issues_assigned_to", "security_issues", ["assigned_to"])
    op.create_index("ix_security_issues_created_at", "security_issues", ["created_at"])

    op.create_table(
        "security_reviews",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("document_name", sa.String(255), nullable=True),
        sa.Column("document_url", sa.String(1000), nullable=True),
        sa.Column("document_type", sa.String(20), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="Pending"),
        sa.Column("ai_analysis_complete", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("ai_analysis_results", postgresql.JSONB(), nullable=True),
        sa.Column("container_id", sa.Integer(), sa.ForeignKey("containers.id"), nullable=True),
        sa.Column("reviewer_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_security_reviews_status", "security_reviews", ["status"])
    op.create_index("ix_security_reviews_container_id", "security_reviews", ["container_id"])

    op.create_table(
        "security_violations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("violation_type", sa.String(20), nullable=False),
        sa.Column("severity", sa.String(10), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="Open"),
        sa.Column("incident_date", sa.DateTime(), nullable=False),
        sa.Column("detection_method", sa.String(200), nullable=True),
        sa.Column("affected_systems", sa.Text(), nullable=True),
        sa.Column("impact_assessment", sa.Text(), nullable=True),
        sa.Column("remediation_steps", sa.Text(), nullable=True),
        sa.Column("container_id", sa.Integer(), sa.ForeignKey("containers.id"), nullable=True),
        sa.Column("related_issue_id", sa.Integer(), sa.ForeignKey("security_issues.id"), nullable=True),
        sa.Column("assigned_to", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_security_violations_violation_type", "security_violations", ["violation_type"])
    op.create_index("ix_security_violations_severity", "security_violations", ["severity"])
    op.create_index("ix_security_violations_status", "security_violations", ["status"])
    op.create_index("ix_security_violations_incident_date", "security_violations", ["incident_date"])
    op.create_index("ix_security_violations_container_id", "security_violations", ["container_id"])
    op.create_index("ix_security_violations_created_at", "security_violations", ["created_at"])

    op.create_table(
        "security_controls",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("control_type", sa.String(50), nullable=False),
        sa.Column("implementation_status", sa.String(20), nullable=False),
        sa.Column("effectiveness_rating", sa.Numeric(5, 2), nullable=True),
        sa.Column("framework_reference", sa.String(100), nullable=True),
        sa.Column("control_family", sa.String(100), nullable=True),
        sa.Column("implementation_notes", sa.Text(), nullable=True),
        sa.Column("testing_frequency", sa.String(50), nullable=True),
        sa.Column("last_tested", sa.DateTime(), nullable=True),
        sa.Column("container_id", sa.Integer(), sa.ForeignKey("containers.id"), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_security_controls_control_type", "security_controls", ["control_type"])
    op.create_index("ix_security_controls_implementation_status", "security_controls", ["implementation_status"])
    op.create_index("ix_security_controls_container_id", "security_controls", ["container_id"])

    op.create_table(
        "architecture_components",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("component_type", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("technology_stack", sa.String(200), nullable=True),
        sa.Column("security_domain", sa.String(100), nullable=True),
        sa.Column("trust_boundary", sa.String(100), nullable=True),
        sa.Column("network_zone", sa.String(100), nullable=True),
        sa.Column("data_classification", sa.String(50), nullable=True),
        sa.Column("position_x", sa.Float(), nullable=True),
        sa.Column("position_y", sa.Float(), nullable=True),
        sa.Column("container_id", sa.Integer(), sa.ForeignKey("containers.id"), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_architecture_components_component_type", "architecture_components", ["component_type"])
    op.create_index("ix_architecture_components_container_id", "architecture_components", ["container_id"])


def downgrade() -> None:
    op.drop_table("architecture_components")
    op.drop_table("security_controls")
    op.drop_table("security_violations")
    op.drop_table("security_reviews")
    op.drop_table("security_issues")
    op.drop_table("containers")
    op.drop_table("users")
