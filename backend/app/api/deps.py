from typing import Annotated

from fastapi import Depends

from app.core.server_config import ServerConfig, get_server_config
from app.engines.transform import DataTransformer


def get_transformer() -> DataTransformer:
    # The provider is process-wide; each transform() call still gets a fresh context.
    return DataTransformer()


TransformerDep = Annotated[DataTransformer, Depends(get_transformer)]
ServerConfigDep = Annotated[ServerConfig, Depends(get_server_config)]
