"""Running the one operation a validated request asks for."""

import logging

from .backend import Backend
from .models import (
    ActionRequest,
    ResetRequest,
    UpdateQdlRequest,
    UpdateRequest,
    VerifyRequest,
)

logger = logging.getLogger(__name__)


def dispatch(request: ActionRequest, backend: Backend) -> bool:
    """
    Invoke the backend operation matching request.

    The device selection, when the action needs one, is resolved here and
    released once the operation returns or raises.

    Returns:
        The operation's own success result, unchanged
    """
    logger.debug(f"Dispatching {request.action}")

    if isinstance(request, VerifyRequest):
        return backend.run_verify(request.images)

    with backend.resolve_device_selection(request.device) as device:
        match request:
            case UpdateRequest():
                return backend.run_update(
                    request.images,
                    device,
                    request.firmware_version,
                    request.config_version,
                    request.carrier,
                    request.open_flags,
                    request.ignore_version_errors,
                    request.override_download,
                    request.modem_storage_index,
                    request.skip_validation,
                )
            case UpdateQdlRequest():
                return backend.run_update_qdl(request.images, device)
            case ResetRequest():
                return backend.run_reset(device, request.open_flags)

    raise AssertionError(f"unhandled action: {request.action}")
