"""
Upstream API router.

HTTP entry points for connectors that cannot call the pipeline in-process,
plus the generic dispatch endpoint used by device simulators.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from ....core.domain.requests import (
    EventReport, PropertyReport, Register, RegisterSub, StateUpdate, SubDeviceRef
)
from ....core.interfaces.upstream import IDeviceUpstreamService
from ..dependencies import get_upstream_service

logger = logging.getLogger(__name__)


class DispatchRequest(BaseModel):
    """Generic upstream submission for an existing device."""
    device_id: int = Field(..., description="Internal device id")
    type: str = Field(..., description="Upstream type: property, event or state")
    identifier: Optional[str] = Field(None, description="Event identifier")
    data: Any = Field(None, description="Property map, event params or state value")


class UpstreamBody(BaseModel):
    """Fields common to every connector submission."""
    product_key: str = Field(..., min_length=1)
    device_name: str = Field(..., min_length=1)
    request_id: Optional[str] = None
    report_time: Optional[datetime] = None
    process_id: Optional[str] = None

    def common(self) -> Dict[str, Any]:
        return {
            'product_key': self.product_key,
            'device_name': self.device_name,
            'request_id': self.request_id,
            'report_time': self.report_time,
            'process_id': self.process_id,
        }


class StateBody(UpstreamBody):
    state: Union[int, str]


class PropertyBody(UpstreamBody):
    properties: Dict[str, Any] = Field(default_factory=dict)


class EventBody(UpstreamBody):
    identifier: str = Field(..., min_length=1)
    params: Dict[str, Any] = Field(default_factory=dict)


class SubDeviceBody(BaseModel):
    product_key: str = Field(..., min_length=1)
    device_name: str = Field(..., min_length=1)


class RegisterSubBody(UpstreamBody):
    sub_devices: List[SubDeviceBody] = Field(default_factory=list, max_length=1000)


class AcceptedResponse(BaseModel):
    accepted: bool = True


router = APIRouter(prefix="/api/v1/upstream", tags=["upstream"])


@router.post("/dispatch", response_model=AcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def dispatch(body: DispatchRequest,
                   service: IDeviceUpstreamService = Depends(get_upstream_service)) -> AcceptedResponse:
    """Submit a generic upstream signal for an existing device (simulator path)."""
    await service.dispatch_generic(body.device_id, body.type, body.identifier, body.data)
    return AcceptedResponse()


@router.post("/state", response_model=AcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def update_state(body: StateBody,
                       service: IDeviceUpstreamService = Depends(get_upstream_service)) -> AcceptedResponse:
    await service.update_state(StateUpdate(state=body.state, **body.common()))
    return AcceptedResponse()


@router.post("/property", response_model=AcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def report_property(body: PropertyBody,
                          service: IDeviceUpstreamService = Depends(get_upstream_service)) -> AcceptedResponse:
    await service.report_property(PropertyReport(properties=body.properties, **body.common()))
    return AcceptedResponse()


@router.post("/event", response_model=AcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def report_event(body: EventBody,
                       service: IDeviceUpstreamService = Depends(get_upstream_service)) -> AcceptedResponse:
    await service.report_event(EventReport(identifier=body.identifier, params=body.params, **body.common()))
    return AcceptedResponse()


@router.post("/register", response_model=AcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def register(body: UpstreamBody,
                   service: IDeviceUpstreamService = Depends(get_upstream_service)) -> AcceptedResponse:
    await service.register(Register(**body.common()))
    return AcceptedResponse()


@router.post("/register-sub", response_model=AcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def register_sub(body: RegisterSubBody,
                       service: IDeviceUpstreamService = Depends(get_upstream_service)) -> AcceptedResponse:
    sub_devices = [SubDeviceRef(item.product_key, item.device_name) for item in body.sub_devices]
    await service.register_sub(RegisterSub(sub_devices=sub_devices, **body.common()))
    return AcceptedResponse()
