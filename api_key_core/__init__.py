"""
API Key Core.

Hashed API key storage over SQLite, MySQL and SQL Server, server
administration helpers, and a FastAPI/Starlette authentication gateway.
"""

__version__ = "0.1.0"
