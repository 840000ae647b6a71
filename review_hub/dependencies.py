from typing import Annotated

from fastapi import Depends, Request

from review_hub.services.reviews import ReviewService
from review_hub.services.token_manager import TokenManager


def get_review_service(request: Request) -> ReviewService:
    return request.app.state.review_service


def get_token_manager(request: Request) -> TokenManager:
    return request.app.state.token_manager


ReviewServiceDep = Annotated[ReviewService, Depends(get_review_service)]
TokenManagerDep = Annotated[TokenManager, Depends(get_token_manager)]
