"""
PostgreSQL Database Module for Honourus.

Handles:
- Users and their credit counters
- Tasks, recognitions and teams
- Task tracker integrations and OAuth states
- Credit activity ledger
"""

from .connection import (
    get_database,
    Database,
    init_database,
    close_database,
)
from .models import (
    Base,
    UserDB,
    TaskDB,
    RecognitionDB,
    TeamDB,
    IntegrationDB,
    OAuthStateDB,
    ActivityLogDB,
)

__all__ = [
    "get_database",
    "Database",
    "init_database",
    "close_database",
    "Base",
    "UserDB",
    "TaskDB",
    "RecognitionDB",
    "TeamDB",
    "IntegrationDB",
    "OAuthStateDB",
    "ActivityLogDB",
]
