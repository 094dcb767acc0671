# Email Sender Module
from .email_sender import EmailResponse, send_email

__all__ = ["EmailResponse", "send_email"]
