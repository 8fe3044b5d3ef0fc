from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from copydesk import frameworks

router = APIRouter()


class FrameworkPublic(BaseModel):
    id: str
    name: str
    description: str
    display_name: str
    sections: list[str]


def _to_public(framework: frameworks.Framework) -> FrameworkPublic:
    return FrameworkPublic(
        id=framework.id,
        name=framework.name,
        description=framework.description,
        display_name=frameworks.display_name(framework.id),
        sections=list(framework.sections),
    )


@router.get("/", response_model=list[FrameworkPublic])
def read_frameworks() -> Any:
    return [_to_public(framework) for framework in frameworks.all_frameworks()]


@router.get("/{framework_id}", response_model=FrameworkPublic)
def read_framework(framework_id: str) -> Any:
    """
    Look up a framework by id, also accepting legacy full labels.
    """
    framework = frameworks.resolve(framework_id) or frameworks.by_name(framework_id)
    if framework is None:
        raise HTTPException(status_code=404, detail="Framework not found")
    return _to_public(framework)
