"""
Device registrar.

Ensures a device row exists for a (product_key, device_name) pair and
announces first sightings downstream. Gateways register their sub-devices
in bulk; the fan-out is processed as an explicit worklist so a large
sub-device list never deepens the call stack, and the policy for a failing
sub-device (continue or abort) is a constructor argument.
"""

import logging
from collections import deque
from dataclasses import replace
from typing import Deque, List, Optional, Tuple

from ..domain.devices import Device, TenantContext
from ..domain.messages import MessageIdentifier, MessageType
from ..domain.requests import Register, RegisterSub, UpstreamRequest
from ..exceptions import UpstreamError
from ..interfaces.directory import IDeviceDirectory
from .publisher import MessagePublisher, build_message
from .side_effects import SideEffectRecorder

logger = logging.getLogger(__name__)

# (product_key, device_name, gateway_id, tenant scope)
RegistrationItem = Tuple[str, str, Optional[int], Optional[TenantContext]]


class DeviceRegistrar:
    """Creates or re-links devices and publishes REGISTER messages for new ones."""

    def __init__(self, directory: IDeviceDirectory, recorder: SideEffectRecorder,
                 publisher: MessagePublisher, abort_on_sub_device_error: bool = False) -> None:
        self._directory = directory
        self._recorder = recorder
        self._publisher = publisher
        self._abort_on_sub_device_error = abort_on_sub_device_error

    async def register(self, request: Register) -> Optional[Device]:
        """
        Register a single device.

        Returns:
            The registered device, or None if registration was rejected
        """
        logger.info(f"Registering device {request.product_key}/{request.device_name}")
        try:
            return await self._register_one((request.product_key, request.device_name, None, None), request)
        except UpstreamError as e:
            logger.error(f"Registration of {request.product_key}/{request.device_name} failed: {e}")
            return None

    async def register_sub(self, request: RegisterSub) -> List[Device]:
        """
        Register the sub-devices of a gateway.

        Returns:
            Sub-devices that were registered successfully
        """
        logger.info(f"Registering {len(request.sub_devices)} sub-devices under "
                    f"{request.product_key}/{request.device_name}")
        gateway = await self._directory.find_by_key(request.product_key, request.device_name)
        if gateway is None:
            logger.error(f"Sub-device registration dropped: gateway "
                         f"{request.product_key}/{request.device_name} not found")
            return []
        if not gateway.is_gateway:
            logger.error(f"Sub-device registration dropped: device {request.product_key}/"
                         f"{request.device_name} is {gateway.device_type.value}, not a gateway")
            return []

        self._recorder.record(gateway, request)

        # Sub-devices are resolved and created only inside the gateway's tenant
        tenant = TenantContext.of(gateway)
        worklist: Deque[RegistrationItem] = deque(
            (ref.product_key, ref.device_name, gateway.id, tenant) for ref in request.sub_devices
        )
        registered: List[Device] = []
        while worklist:
            item = worklist.popleft()
            try:
                registered.append(await self._register_one(item, request))
            except Exception as e:
                if self._abort_on_sub_device_error:
                    logger.error(f"Aborting sub-device registration under {gateway.device_key} "
                                 f"at {item[0]}/{item[1]}, {len(worklist)} left unprocessed: {e}")
                    raise
                logger.exception(f"Sub-device {item[0]}/{item[1]} under {gateway.device_key} failed: {e}")

        message = build_message(request, MessageType.REGISTER,
                                MessageIdentifier.REGISTER_REGISTER_SUB.value,
                                [ref.to_dict() for ref in request.sub_devices])
        await self._publisher.publish(message, gateway)
        return registered

    async def _register_one(self, item: RegistrationItem, request: UpstreamRequest) -> Device:
        product_key, device_name, gateway_id, tenant = item

        device = await self._directory.find_by_key(product_key, device_name, tenant)
        registered_new = device is None
        if device is None:
            # Raises DeviceNotFoundError for a product outside the tenant, which
            # also covers an existing row that belongs to another tenant
            device = await self._directory.create(product_key, device_name, gateway_id, tenant)
            logger.info(f"Registered new device {product_key}/{device_name} as {device.device_key}")
        elif gateway_id is not None and device.gateway_id != gateway_id:
            await self._directory.set_gateway(TenantContext.of(device), device.id, gateway_id)
            logger.info(f"Re-linked device {product_key}/{device_name} from gateway "
                        f"{device.gateway_id} to {gateway_id}")
            device = replace(device, gateway_id=gateway_id)

        self._recorder.record(device, request)

        if registered_new:
            message = build_message(request, MessageType.REGISTER,
                                    MessageIdentifier.REGISTER_REGISTER.value)
            await self._publisher.publish(message, device)
        return device
