"""HTTP client helpers for consumers of the Cashbook API."""

from cashbook.client.role_context import RoleContext, RoleState, SessionClaims

__all__ = ["RoleContext", "RoleState", "SessionClaims"]
