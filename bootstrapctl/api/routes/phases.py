from fastapi import APIRouter

from bootstrapctl.models import PhaseIdentity
from bootstrapctl.resources import resource_name

router = APIRouter()


@router.get("/phases")
def list_phases():
    return [
        {"phase": p.display_name, "resource": resource_name(p)}
        for p in PhaseIdentity
    ]
