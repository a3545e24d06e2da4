import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Tuple

from vipride.core.config import settings
from vipride.core.logger import logger
from vipride.models.schemas import BookingDetails

CONFIRMATION_SUBJECT = "Rezervasyon Onayı - VIP Ride Istanbul Airport"


def _open_smtp() -> smtplib.SMTP:
    # Port 465 is implicit TLS, anything else upgrades with STARTTLS
    if settings.EMAIL_PORT == 465:
        return smtplib.SMTP_SSL(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=30)
    server = smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=30)
    server.starttls()
    return server


def send_email(subject: str, body: Optional[str], to_email: str, html: Optional[str] = None) -> bool:
    """
    Sends an email over SMTP.
    Returns: True if successful, False otherwise (never raises).
    """
    if not settings.EMAIL_ENABLED:
        logger.info("ℹ️ Email notifications are disabled.")
        return False

    if not to_email:
        logger.error("❌ No recipient email given.")
        return False

    if not settings.EMAIL_USER or not settings.EMAIL_PASSWORD:
        logger.error("❌ SMTP credentials missing (EMAIL_USER / EMAIL_PASSWORD).")
        return False

    try:
        msg = MIMEMultipart("alternative")
        msg['From'] = settings.EMAIL_USER
        msg['To'] = to_email
        msg['Subject'] = subject

        if body:
            msg.attach(MIMEText(body, 'plain', 'utf-8'))
        if html:
            msg.attach(MIMEText(html, 'html', 'utf-8'))

        server = _open_smtp()
        try:
            server.login(settings.EMAIL_USER, settings.EMAIL_PASSWORD)
            server.sendmail(settings.EMAIL_USER, to_email, msg.as_string())
        finally:
            server.quit()

        logger.info(f"✅ Email sent to {to_email} with subject: '{subject}'")
        return True
    except Exception as e:
        logger.error(f"❌ Email sending failed ({to_email}): {e}")
        return False


def build_confirmation_email(details: BookingDetails) -> Tuple[str, str]:
    """Returns (subject, html) of the booking confirmation sent to the customer."""
    total = details.totalPrice if details.totalPrice not in (None, "") else "-"
    if isinstance(total, (int, float)):
        total = f"{total:g}"
    html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h2 style="color: #333;">Rezervasyon Onayı</h2>
            <p>Sayın {details.firstName or ""} {details.lastName or ""},</p>
            <p>Rezervasyonunuz başarıyla oluşturulmuştur. Rezervasyon detaylarınız aşağıda yer almaktadır:</p>

            <div style="background-color: #f9f9f9; padding: 20px; border-radius: 5px; margin: 20px 0;">
                <p><strong>Rezervasyon Referansı:</strong> {details.bookingReference or ""}</p>
                <p><strong>Hizmet:</strong> {details.serviceName or ""}</p>
                <p><strong>Tarih:</strong> {details.date or ""}</p>
                <p><strong>Saat:</strong> {details.time or ""}</p>
                <p><strong>Alış Noktası:</strong> {details.pickupLocation or ""}</p>
                <p><strong>Bırakış Noktası:</strong> {details.dropoffLocation or ""}</p>
                <p><strong>Toplam Tutar:</strong> {total} EUR</p>
            </div>

            <p>Herhangi bir sorunuz olması durumunda bizimle iletişime geçebilirsiniz.</p>

            <p>Saygılarımızla,<br>VIP Ride Istanbul Airport Ekibi</p>
        </div>
    """
    return CONFIRMATION_SUBJECT, html


def send_booking_confirmation(details: BookingDetails) -> bool:
    subject, html = build_confirmation_email(details)
    logger.info(f"📧 Sending booking confirmation {details.bookingReference} to {details.email}")
    return send_email(subject, None, details.email, html=html)
