"""Shared API dependencies."""

from __future__ import annotations

from fastapi import Request

from cms.services.config_service import ConfigService


def get_config_service(request: Request) -> ConfigService:
    """Get the config service from app state."""
    service: ConfigService = request.app.state.config_service
    return service
