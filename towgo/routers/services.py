"""Premium services catalog, payments and Stripe checkout."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from towgo.database import Payment, Service, get_db
from towgo.dependencies import get_current_user, get_stripe_client
from towgo.models.services import (
    CheckoutRequest,
    CheckoutResponse,
    PaymentResponse,
    PaymentStatusResponse,
    ServiceCreateRequest,
    ServiceResponse,
    ServiceUpdateRequest,
)
from towgo.services.stripe_client import StripeClient, StripeError

router = APIRouter(tags=["services"])
logger = logging.getLogger(__name__)


def _get_service_or_404(db: Session, service_id: int) -> Service:
    service = db.get(Service, service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.get("/services", response_model=List[ServiceResponse])
async def list_services(db: Session = Depends(get_db)):
    """List active services."""
    services = db.query(Service).filter(Service.is_active.is_(True)).order_by(Service.id).all()
    return [ServiceResponse.model_validate(service) for service in services]


@router.get("/services/{service_id}", response_model=ServiceResponse)
async def get_service(service_id: int, db: Session = Depends(get_db)):
    return ServiceResponse.model_validate(_get_service_or_404(db, service_id))


@router.post("/services", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(payload: ServiceCreateRequest, db: Session = Depends(get_db)):
    service = Service(**payload.model_dump())
    db.add(service)
    db.commit()
    db.refresh(service)
    return ServiceResponse.model_validate(service)


@router.patch("/services/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: int,
    payload: ServiceUpdateRequest,
    db: Session = Depends(get_db),
):
    """Apply a partial update."""
    service = _get_service_or_404(db, service_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(service, field, value)
    db.commit()
    db.refresh(service)
    return ServiceResponse.model_validate(service)


@router.get("/payments", response_model=List[PaymentResponse])
async def list_payments(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    payments = (
        db.query(Payment)
        .filter(Payment.user_id == current_user["id"])
        .order_by(Payment.created_at.desc())
        .all()
    )
    return [PaymentResponse.model_validate(payment) for payment in payments]


@router.get("/payments/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    payment = db.get(Payment, payment_id)
    if payment is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    if payment.user_id != current_user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to view this payment")
    return PaymentResponse.model_validate(payment)


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    payload: CheckoutRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
    stripe: StripeClient = Depends(get_stripe_client),
):
    """
    Start a Stripe Checkout for a service.

    A pending payment is recorded against the session; its final state is
    owned by Stripe.
    """
    if not stripe.is_configured:
        raise HTTPException(
            status_code=503,
            detail="Stripe is not configured. Please add your Stripe API keys.",
        )

    service = _get_service_or_404(db, payload.service_id)

    try:
        session = await stripe.create_checkout_session(
            name=service.name,
            description=service.description,
            amount=service.price,
            success_url=payload.success_url,
            cancel_url=payload.cancel_url,
            metadata={"userId": current_user["id"], "serviceId": str(service.id)},
            price_id=service.price_id,
        )
    except StripeError as e:
        raise HTTPException(status_code=502, detail=str(e))

    db.add(Payment(
        user_id=current_user["id"],
        service_id=service.id,
        amount=service.price,
        status="pending",
        session_id=session["id"],
        payment_intent_id=session.get("payment_intent"),
    ))
    db.commit()

    logger.info(f"Checkout session {session['id']} created for service {service.id}")
    return CheckoutResponse(id=session["id"], url=session["url"])


@router.get("/payment-status/{session_id}", response_model=PaymentStatusResponse)
async def get_payment_status(session_id: str, db: Session = Depends(get_db)):
    payment = db.query(Payment).filter(Payment.session_id == session_id).first()
    if payment is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    return PaymentStatusResponse(session_id=session_id, status=payment.status, amount=payment.amount)
