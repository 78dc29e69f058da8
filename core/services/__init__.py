"""Services for the core app.

Service modules are imported directly (for example
``core.services.notification_service``) to keep app loading free of
import cycles between services, repositories and signals.
"""
