"""SQLAlchemy models for the RecruitIQ tenant-scoped schema"""

from .base import Base, PortableJSONB
from .organization import Organization
from .workspace import Workspace
from .flow_template import FlowTemplate
from .job import Job, JobStatus
from .candidate import Candidate
from .application import Application, ApplicationStatus
from .interview import Interview, InterviewInterviewer
from .communication import Communication

__all__ = [
    "Base",
    "PortableJSONB",
    "Organization",
    "Workspace",
    "FlowTemplate",
    "Job",
    "JobStatus",
    "Candidate",
    "Application",
    "ApplicationStatus",
    "Interview",
    "InterviewInterviewer",
    "Communication",
]
