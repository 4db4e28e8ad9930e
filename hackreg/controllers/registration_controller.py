# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: team registration and the pre-registration interest list."""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from hackreg.core.dependencies import get_registration_service
from hackreg.errors import MalformedInputError, SchemaViolationError
from hackreg.schemas import (
    ErrorResponse, MessageResponse, PreRegistrationRequest, RegistrationResponse,
)
from hackreg.services.registration_service import RegistrationService

router = APIRouter(prefix="/api/v1", tags=["Registration"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


@router.post("/register", status_code=201, response_model=RegistrationResponse,
             responses=ERROR_RESPONSES)
async def register_team(request: Request,
                        service: RegistrationService = Depends(get_registration_service)):
    raw_body = await request.body()
    client_ip = request.client.host if request.client else None
    return await run_in_threadpool(service.register, raw_body, bearer_token(request), client_ip)


@router.post("/registry", response_model=MessageResponse, responses=ERROR_RESPONSES)
async def pre_register(request: Request,
                       service: RegistrationService = Depends(get_registration_service)):
    data = RegistrationService.parse_body(await request.body())
    if not isinstance(data, dict):
        raise MalformedInputError("Expected a JSON object")
    try:
        body = PreRegistrationRequest.model_validate(data)
    except ValidationError as exc:
        raise SchemaViolationError("Invalid email",
                                   [{"field": "email", "message": e["msg"].replace("Value error, ", "")}
                                    for e in exc.errors()])
    if await run_in_threadpool(service.pre_register, body.email):
        return MessageResponse(message="Email registered")
    return MessageResponse(message="Email already registered")
