"""HTTP API for the payroll scheduler."""

from payroll_scheduler.api.app import create_app

__all__ = ["create_app"]
