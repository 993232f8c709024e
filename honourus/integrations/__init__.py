from .task_trackers import (
    OAuthProviderError,
    JiraOAuthProvider,
    ClickUpOAuthProvider,
    get_provider,
    SUPPORTED_SERVICES,
)
from .supabase_auth import SupabaseAuthClient, AuthProviderError, get_auth_client

__all__ = [
    "OAuthProviderError",
    "JiraOAuthProvider",
    "ClickUpOAuthProvider",
    "get_provider",
    "SUPPORTED_SERVICES",
    "SupabaseAuthClient",
    "AuthProviderError",
    "get_auth_client",
]
