import logging
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends

from copydesk.generation.copywriter import Copywriter, CopyRequest, CopyResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@lru_cache
def get_copywriter() -> Copywriter:
    return Copywriter()


CopywriterDep = Annotated[Copywriter, Depends(get_copywriter)]


@router.post("/", response_model=CopyResponse)
async def generate_copy(payload: CopyRequest, copywriter: CopywriterDep) -> CopyResponse:
    """
    Generate copy for one chat turn.

    Provider failures never surface here: the response then carries the
    framework's fallback copy. Only a malformed body is rejected (422).
    """
    logger.info(
        "Generating copy (framework=%r, profile=%s, history=%s)",
        payload.framework,
        "yes" if payload.business_profile else "no",
        len(payload.previous_messages),
    )
    content = await copywriter.run(payload)
    return CopyResponse(content=content)
