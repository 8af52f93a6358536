"""API v1 blueprint package bundling versioned routes."""

from __future__ import annotations

from flask import Blueprint

API_VERSION = "v1"

# Import blueprints *only here* to keep imports localized and avoid cycles.
from .auth import bp as auth_bp  # noqa: E402
from .health import bp as health_bp  # noqa: E402
from .owners import bp as owners_bp  # noqa: E402
from .ratings import bp as ratings_bp  # noqa: E402
from .stats import bp as stats_bp  # noqa: E402
from .stores import bp as stores_bp  # noqa: E402
from .users import bp as users_bp  # noqa: E402

# Each tuple: (blueprint, url_prefix_relative_to_version)
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),  # -> /api/v1/health
    (auth_bp, ""),  # -> /api/v1/login, /api/v1/auth/update-password, ...
    (stats_bp, ""),  # -> /api/v1/stats
    (stores_bp, "/stores"),
    (ratings_bp, "/ratings"),
    (users_bp, "/users"),
    (owners_bp, "/owners"),
]
