"""Development settings."""
from .base import *  # noqa: F401,F403

DEBUG = True

# Aggregators can fan out locally against PostgreSQL
PERFORMANCE_MAX_WORKERS = env.int("PERFORMANCE_MAX_WORKERS", default=4)  # noqa: F405

# Logging
LOGGING["root"]["level"] = "DEBUG"  # noqa: F405
