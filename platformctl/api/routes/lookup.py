from typing import Optional

from fastapi import APIRouter, HTTPException

from platformctl.config import get_config
from platformctl.modules.capacity import CapacityTable
from platformctl.modules.versions import ShimTable

router = APIRouter()


@router.get("/max-pods/{instance_type}")
def max_pods(instance_type: str, default: Optional[int] = None):
    if default is None:
        default = get_config().capacity.default_max_pods
    table = CapacityTable()
    return {
        "instanceType": instance_type,
        "maxPods": table.max_pods(instance_type, default),
        "known": instance_type in table,
    }


@router.get("/shim/{version}")
def shim(version: str):
    resolution = ShimTable().select(version)
    if not resolution.resolved:
        raise HTTPException(status_code=404, detail=resolution.reason)
    return {"version": version, "shim": resolution.shim_id}
