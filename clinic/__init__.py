"""
Clinic Demo Service

A FastAPI-based clinic management backend with admin, doctor and patient
dashboards, session tokens and a role gate in front of every dashboard.
"""

__version__ = "1.0.0"
