"""Login-scoped session state."""

from roadmate.core.session.context import SessionContext

__all__ = ["SessionContext"]
