from typing import Annotated

from fastapi import Path, Request

from visualgenie.schemas import MAX_ID
from visualgenie.storage import Storage


# Out-of-range ids are rejected as 400 before they reach a backend
PathId = Annotated[int, Path(gt=0, le=MAX_ID)]


def get_storage(request: Request) -> Storage:
    """Storage chosen at startup; handlers only ever see the contract."""
    return request.app.state.storage
