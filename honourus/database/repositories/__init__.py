"""
Repository classes for database operations.

Each repository handles CRUD and read-model queries for its entity type.
"""

from .users import UserRepository, get_user_repository, add_credits
from .tasks import TaskRepository, get_task_repository
from .recognitions import RecognitionRepository, get_recognition_repository
from .team import TeamRepository, get_team_repository
from .integrations import IntegrationRepository, get_integration_repository
from .oauth_states import OAuthStateRepository, get_oauth_state_repository

__all__ = [
    "UserRepository",
    "get_user_repository",
    "add_credits",
    "TaskRepository",
    "get_task_repository",
    "RecognitionRepository",
    "get_recognition_repository",
    "TeamRepository",
    "get_team_repository",
    "IntegrationRepository",
    "get_integration_repository",
    "OAuthStateRepository",
    "get_oauth_state_repository",
]
