"""
Transaction API endpoints.
"""

from fastapi import APIRouter, Depends

from portfolio_engine.api.dependencies import get_submitter
from portfolio_engine.api.schemas.api_models import TransactionRequest, TransactionResponse
from portfolio_engine.infrastructure.transactions.submitter import TransactionSubmitter

router = APIRouter()


@router.post("")
async def submit_transaction(
    body: TransactionRequest,
    submitter: TransactionSubmitter = Depends(get_submitter),
) -> TransactionResponse:
    """Submit a deposit or withdraw and wait for its terminal outcome.

    Failed submissions still answer 200; the outcome field says what happened.
    """
    result = await submitter.request(body.kind, body.amount, body.destination_account)
    return TransactionResponse.from_result(result)
