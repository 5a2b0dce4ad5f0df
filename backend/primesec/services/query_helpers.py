"""
Shared SQL expressions for listing queries.
"""

from sqlalchemy import case

from primesec.models.enums import SEVERITY_RANK, HIERARCHY_RANK


def severity_rank(column):
    """Critical=1 .. Low=4; sort ascending for Critical-first."""
    return case(
        *((column == severity, rank) for severity, rank in SEVERITY_RANK.items()),
        else_=5,
    )


def hierarchy_rank(column):
    """Epic=0, Story=1, Task=2; sort descending for Task-first."""
    return case(
        *((column == level, rank) for level, rank in HIERARCHY_RANK.items()),
        else_=-1,
    )
