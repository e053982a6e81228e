"""SMTP mailer.

If you always send through SMTP and never need a ``DynMailer``, consider
using aiosmtplib directly.
"""

from .mailer import SmtpInvalidCertsPolicy, SmtpMailer

__all__ = ["SmtpInvalidCertsPolicy", "SmtpMailer"]
