"""RecruitIQ multi-tenant row isolation."""

__version__ = "0.1.0"
