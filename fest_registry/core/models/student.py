"""
Students and their applications. A student may apply more than once (reapplication after
rejection); the application with the highest id is the authoritative one.
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from fest_registry.core.enums import ApplicationStatus
from fest_registry.db.session import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    usn = Column(String(20), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    gender = Column(String(20), nullable=True)
    college_id = Column(Integer, ForeignKey("colleges.id", ondelete="CASCADE"), nullable=False, index=True)
    passport_photo_url = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    reapply_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    college = relationship("College", back_populates="students")
    applications = relationship("StudentApplication", back_populates="student", order_by="StudentApplication.id")


class StudentApplication(Base):
    __tablename__ = "student_applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=ApplicationStatus.SUBMITTED.value)
    blood_group = Column(String(10), nullable=True)
    address = Column(Text, nullable=True)
    department = Column(String(255), nullable=True)
    year_of_study = Column(Integer, nullable=True)
    semester = Column(Integer, nullable=True)
    rejected_reason = Column(Text, nullable=True)
    submitted_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    student = relationship("Student", back_populates="applications")
    documents = relationship("ApplicationDocument", back_populates="application", cascade="all, delete-orphan")


class ApplicationDocument(Base):
    """Uploaded document of an application (AADHAR, COLLEGE_ID_CARD, MARKS_CARD, ...)."""

    __tablename__ = "application_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("student_applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    document_type = Column(String(50), nullable=False)
    document_url = Column(Text, nullable=False)
    uploaded_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    application = relationship("StudentApplication", back_populates="documents")
