"""
Bank Portal

Server side of a demonstration online-banking dashboard: accounts, transfers,
beneficiaries, treasury, job-portal salary setup and compliance paperwork.
Persistent state lives in a hosted backend-as-a-service; this package holds the
form validation, currency and tax arithmetic, and PDF document generation.
"""

__version__ = "1.0.0"
