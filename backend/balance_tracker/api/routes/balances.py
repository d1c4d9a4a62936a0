"""Single-address balance endpoints."""
from fastapi import APIRouter, Depends, Query
from balance_tracker.api.deps import get_extractor
from balance_tracker.models.balance import BalanceResponse, ErrorResponse
from balance_tracker.services.extractor import BalanceExtractor
from balance_tracker.utils.addresses import is_valid_address, validate_address

router = APIRouter()


@router.get(
    "",
    response_model=BalanceResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def get_balance(
    address: str = Query(..., description="Wallet address (0x + 40 hex)"),
    extractor: BalanceExtractor = Depends(get_extractor)
):
    """
    Fetch the portfolio balance and percentage change of one address.
    
    Returns 400 for a malformed address and 500 when the profile page
    could not be read. A missing percentage change is not an error.
    """
    validate_address(address)
    result = await extractor.fetch_balance(address)
    return BalanceResponse(balance=result.balance, percentage_change=result.percentage_change)


@router.get("/validate/{address}")
async def validate_wallet(address: str):
    """Validate a 0x wallet address."""
    is_valid = is_valid_address(address)
    
    return {
        "address": address,
        "valid": is_valid,
        "message": "Address is valid" if is_valid else "Invalid 0x address format"
    }
