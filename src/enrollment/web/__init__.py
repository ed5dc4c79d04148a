"""Enrollment web layer (FastAPI)."""
