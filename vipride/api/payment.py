from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from vipride.core.errors import PaymentGatewayError
from vipride.core.logger import logger
from vipride.models.schemas import BookingDetails, EmailRequest, PaymentRequest
from vipride.services import booking_service as booking
from vipride.services import payment_service as payments
from vipride.services.notification_service import send_email

router = APIRouter()


@router.post("/payment")
async def payment(req: PaymentRequest):
    """
    Charges the card (when the gateway is configured and card data was sent),
    then stores the reservation and emails the customer.
    Once the card is charged the answer is always 200 {"status": "success"}.
    """
    details = req.bookingDetails or BookingDetails()
    logger.info(f"=== Payment request {details.bookingReference or req.basketId or '-'} ===")

    gateway = payments.payment_gateway
    if req.paymentCard and gateway.is_configured:
        try:
            result = await run_in_threadpool(gateway.create_payment, req)
        except PaymentGatewayError as e:
            return JSONResponse(status_code=500, content={"error": str(e) or "Payment failed"})

        if result.get("status") != "success":
            # The wizard shows its payment-failed screen on this
            return result
    else:
        logger.warning("⚠️ Skipping card charge (gateway not configured or no card in request)")

    await booking.booking_service.process_booking(details)
    return {"status": "success"}


@router.post("/send-email")
async def send_email_endpoint(req: EmailRequest):
    sent = await run_in_threadpool(send_email, req.subject, req.text, req.to, req.html)
    if not sent:
        return JSONResponse(status_code=500, content={"error": "Email could not be sent"})
    return {"message": "Email sent successfully"}
