# fintech_index/mailer.py
import logging
import smtplib
import ssl
from email.message import EmailMessage

from fintech_index import config

log = logging.getLogger(__name__)


def send_email(to: str, subject: str, body: str) -> bool:
    """Envía un correo de texto plano. Devuelve False si no se pudo enviar."""
    if not config.SMTP_HOST:
        log.warning("SMTP not configured: e-mail to %s not sent (%s)", to, subject)
        return False

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = config.SMTP_FROM or config.SMTP_USER
    msg["To"] = to
    msg.set_content(body)

    ctx = ssl.create_default_context()
    try:
        if config.SMTP_PORT == 465:   # SSL
            with smtplib.SMTP_SSL(config.SMTP_HOST, config.SMTP_PORT, context=ctx) as srv:
                if config.SMTP_USER:
                    srv.login(config.SMTP_USER, config.SMTP_PASS)
                srv.send_message(msg)
        else:                         # STARTTLS
            with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT) as srv:
                srv.starttls(context=ctx)
                if config.SMTP_USER:
                    srv.login(config.SMTP_USER, config.SMTP_PASS)
                srv.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        log.warning("E-mail to %s failed: %s", to, e)
        return False

    log.info("E-mail sent to %s: %s", to, subject)
    return True


def send_verification_notice(to: str) -> bool:
    return send_email(
        to,
        "Your account has been verified",
        "You can now log in to the African Fintech Index platform.",
    )
