from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shopsense import schemas
from shopsense.cart import BillingSession
from shopsense.database import get_db
from shopsense.dependencies import find_billing_session, get_billing_session
from shopsense.errors import StaleTranscription
from shopsense.routes.cart import add_text_to_cart, cart_response

# ------------------------------------------------------------------
# Speech recognition runs on the device; these endpoints only decide
# whether a finalized utterance still belongs to the active listen session.
# ------------------------------------------------------------------
router = APIRouter(prefix="/shops/{shop_id}/cart/{session_id}/voice", tags=["Voice"])


@router.post("/start", response_model=schemas.VoiceStarted)
def start_listening(session: BillingSession = Depends(get_billing_session)):
    return {"token": session.listener.start()}


@router.post("/stop")
def stop_listening(session: BillingSession | None = Depends(find_billing_session)):
    if session is not None:
        session.listener.stop()
    return {"listening": False}


@router.post("/error")
def report_voice_error(
    payload: schemas.VoiceError,
    session: BillingSession | None = Depends(find_billing_session)
):
    if session is None:
        return {"listening": False, "error": None}

    session.listener.report_error(payload.token, payload.message)
    return {"listening": session.listener.is_listening, "error": session.listener.last_error}


@router.post("/result")
def voice_result(
    payload: schemas.VoiceResult,
    session: BillingSession | None = Depends(find_billing_session),
    db: Session = Depends(get_db)
):
    """
    Apply one finalized utterance to the cart.
    Same stock rules as typed input: over-stock lines are rejected, not capped.
    """
    if session is None:
        # no cart was ever opened for this token
        raise StaleTranscription()

    cart = session.listener.accept(
        payload.token,
        payload.text,
        apply=lambda line: add_text_to_cart(line, session, db),
    )
    if cart is None:
        return {"applied": False, "cart": cart_response(session)}

    return {"applied": True, "cart": cart}
