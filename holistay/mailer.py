import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from holistay.errors import EmailDeliveryError
from holistay.logger import get_logger

logger = get_logger("mailer")


class SmtpMailer:
    """Sends transactional email over SMTP with STARTTLS (Gmail by default)."""

    def __init__(self, host, port, username, password, from_email):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email or username

    def send(self, to, subject, html):
        if not self.username or not self.password:
            raise EmailDeliveryError("Email not configured. SMTP credentials missing.")

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = self.from_email
        msg['To'] = to
        msg.attach(MIMEText(html, 'html'))

        try:
            with smtplib.SMTP(self.host, self.port, timeout=10) as server:
                server.starttls()
                server.login(self.username, self.password)
                server.sendmail(self.from_email, to, msg.as_string())
        except smtplib.SMTPAuthenticationError as e:
            raise EmailDeliveryError("SMTP authentication failed") from e
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"SMTP error: {e}") from e

        logger.info(f"Email sent to {to}: {subject}")


class ConsoleMailer:
    """
    Dev mailer: logs the message instead of sending it, so OTP codes can be
    copied from the console.
    """

    def send(self, to, subject, html):
        logger.info(f"[EMAIL] to={to} subject={subject!r}\n{html}")


def create_mailer(config):
    if config.get('MAIL_BACKEND') == 'smtp':
        return SmtpMailer(
            host=config['SMTP_HOST'],
            port=config['SMTP_PORT'],
            username=config['SMTP_USER'],
            password=config['SMTP_PASSWORD'],
            from_email=config['MAIL_FROM'],
        )
    return ConsoleMailer()
