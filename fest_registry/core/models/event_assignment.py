"""
Event assignment tables, one per event category, all with the same shape.

A row puts a student or an accompanist on one event of one college, either as a
PARTICIPANT (students only) or as an ACCOMPANIST.
"""

from datetime import datetime
from typing import Dict

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table

from fest_registry.core.event_categories import EVENT_CATEGORIES
from fest_registry.db.session import Base


def _event_table(table_name: str) -> Table:
    return Table(
        table_name,
        Base.metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("college_id", Integer, ForeignKey("colleges.id", ondelete="CASCADE"), nullable=False, index=True),
        # student | accompanist
        Column("person_type", String(20), nullable=False),
        Column("student_id", Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=True),
        Column("accompanist_id", Integer, ForeignKey("accompanists.id", ondelete="CASCADE"), nullable=True),
        # PARTICIPANT | ACCOMPANIST
        Column("event_type", String(20), nullable=False),
        Column("full_name", String(255), nullable=False),
        Column("phone", String(20), nullable=True),
        Column("email", String(255), nullable=True),
        Column("created_at", DateTime(timezone=True), default=datetime.utcnow, nullable=False),
    )


# slug -> Table
EVENT_TABLES: Dict[str, Table] = {slug: _event_table(name) for slug, name in EVENT_CATEGORIES.items()}
