import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from platformctl.config import get_config
from platformctl.errors import PlatformError
from platformctl.loader import parse_platform_spec
from platformctl.modules.composer import PlatformComposer
from platformctl.models import ConnectionParams

router = APIRouter()

logger = logging.getLogger("platformctl.api.compose")


class Connection(BaseModel):
    api_server_endpoint: str
    certificate_authority: str


class ComposeRequest(BaseModel):
    platform: Dict[str, Any]
    connection: Optional[Connection] = None


class ComposeResponse(BaseModel):
    status: str
    descriptor: Dict[str, Any]
    warnings: List[str] = []


@router.post("/compose", response_model=ComposeResponse)
def compose(req: ComposeRequest):
    config = get_config()
    try:
        spec = parse_platform_spec(req.platform, config.capacity.default_instance_type)
        connection = None
        if req.connection is not None:
            connection = ConnectionParams(
                cluster_name=spec.name,
                api_server_endpoint=req.connection.api_server_endpoint,
                certificate_authority=req.connection.certificate_authority,
                service_cidr=config.cluster.service_cidr,
                dns_cluster_ip=config.cluster.dns_cluster_ip,
            )
        descriptor = PlatformComposer(config=config).compose(spec, connection)
    except PlatformError as e:
        logger.info(f"[COMPOSE] rejected: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    warnings = []
    if not descriptor.cluster.shim.resolved:
        warnings.append(descriptor.cluster.shim.reason)
    return {"status": "success", "descriptor": descriptor.to_dict(), "warnings": warnings}
