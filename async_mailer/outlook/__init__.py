"""Outlook (Office365) mailer using the Microsoft Graph API."""

from .mailer import OutlookMailer

__all__ = ["OutlookMailer"]
