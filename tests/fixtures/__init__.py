"""Shared pytest fixtures and helpers for UniEats tests."""

from .core import *  # noqa: F401,F403
from .oidc import *  # noqa: F401,F403
from .services import *  # noqa: F401,F403
