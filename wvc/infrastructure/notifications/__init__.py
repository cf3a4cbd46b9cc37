from .logging_notifier import LoggingVerificationNotifier, render_verification_email

__all__ = ["LoggingVerificationNotifier", "render_verification_email"]
