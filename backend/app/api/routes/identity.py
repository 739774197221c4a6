import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from app.api.deps import ServerConfigDep, TransformerDep
from app.core.identity import derive_identity
from app.engines.transform import TransformError
from app.schemas import (
    ErrorItem,
    Identity,
    IdentityRequest,
    IdentityResponse,
    InvalidDataResponse,
)

_log = logging.getLogger(__name__)

router = APIRouter(prefix="/identity", tags=["identity"])


@router.post(
    "",
    response_model=IdentityResponse,
    responses={400: {"model": InvalidDataResponse}},
)
def create_identity(
    body: IdentityRequest,
    cfg: ServerConfigDep,
    transformer: TransformerDep,
) -> IdentityResponse | JSONResponse:
    """
    Derive the document identity with the configured identity factory.

    Returns identity null when no factory is configured or the factory returns null.
    Script rejections and script errors are 400 INVALID_DATA; engine or output
    contract failures are 500. A missing or non-object `data` is 400 INVALID_DATA
    with no errors.
    """
    if not isinstance(body.data, dict):
        return JSONResponse(status_code=400, content=InvalidDataResponse().model_dump())
    if cfg.identity is None:
        return IdentityResponse(identity=None)
    try:
        identity = derive_identity(cfg.identity.factory, body.data, transformer)
    except TransformError as e:
        if not e.kind.is_client_error:
            _log.error("Identity factory failed: kind=%s", e.kind.value)
            raise HTTPException(status_code=500, detail="Internal server error") from e
        content = InvalidDataResponse(errors=[ErrorItem(message=e.message)])
        return JSONResponse(status_code=400, content=content.model_dump())
    if identity is None:
        return IdentityResponse(identity=None)
    return IdentityResponse(identity=Identity(**identity))
