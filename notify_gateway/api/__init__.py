"""Notify Gateway — HTTP API Package.

Components:
  - app: application factory and error middleware
  - email_routes: /api/email (direct template email)
  - notification_routes: /api/notifications (workflow email, preview, push)
  - common: app keys, body parsing and status mapping
"""

from notify_gateway.api.app import create_app

__all__ = ["create_app"]
