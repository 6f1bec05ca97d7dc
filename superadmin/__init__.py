"""
Super Admin Dashboard
Backend for managing faculty, students, internships and skills tests.

Architecture:
- MongoDB: every dashboard document, accounts and sessions
- FastAPI: REST endpoints + WebSocket snapshot streams
"""

__version__ = "1.0.0"
