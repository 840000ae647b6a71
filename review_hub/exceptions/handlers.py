import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import ProviderContractError

logger = logging.getLogger(__name__)


async def provider_contract_error_handler(
    _request: Request, exc: ProviderContractError
) -> JSONResponse:
    logger.error("Hostaway contract violation: %s", exc.message)
    return JSONResponse(
        status_code=502,
        content={"detail": f"Unexpected Hostaway response: {exc.message}"},
    )
