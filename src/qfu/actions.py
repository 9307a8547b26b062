"""Deciding which single action an invocation asks for."""

import logging

from .errors import RangeError, UsageError
from .models import (
    MAX_STORAGE_INDEX,
    ActionRequest,
    Options,
    ResetRequest,
    UpdateQdlRequest,
    UpdateRequest,
    VerifyRequest,
)
from .selection import build_device_selection, resolve_open_flags

logger = logging.getLogger(__name__)

IMAGE_ACTIONS = ("update", "update-qdl", "verify")
DEVICE_ACTIONS = ("update", "update-qdl", "reset")
OPEN_FLAGS_ACTIONS = ("update", "reset")


def requested_actions(options: Options) -> list[str]:
    """Names of all the action flags that were given."""
    flags = {
        "update": options.update,
        "update-qdl": options.update_qdl,
        "reset": options.reset,
        "verify": options.verify,
    }
    return [name for name, given in flags.items() if given]


def build_action_request(options: Options) -> ActionRequest:
    """
    Validate the options and build the request for the one action given.

    Checks run in this order: number of actions, firmware images, device
    selection, device open flags, modem storage index.

    Args:
        options: every flag from the command line

    Returns:
        The request model for the selected action

    Raises:
        UsageError: If not exactly one action was given, or images are missing
        SelectionError: If the action needs a device and none was given
        ConfigError: If the device open mode flags contradict each other
        RangeError: If the modem storage index is out of range
    """
    actions = requested_actions(options)
    if not actions:
        raise UsageError("no actions specified")
    if len(actions) > 1:
        raise UsageError("too many actions specified")
    action = actions[0]
    logger.debug(f"Requested action: {action}")

    if action in IMAGE_ACTIONS and not options.images:
        raise UsageError("no firmware images specified")

    if action in DEVICE_ACTIONS:
        device = build_device_selection(
            cdc_wdm=options.cdc_wdm,
            tty=options.tty,
            vid=options.vid,
            pid=options.pid,
            busnum=options.busnum,
            devnum=options.devnum,
        )

    if action in OPEN_FLAGS_ACTIONS:
        open_flags = resolve_open_flags(
            proxy=options.device_open_proxy,
            qmi=options.device_open_qmi,
            mbim=options.device_open_mbim,
            auto=options.device_open_auto,
        )

    match action:
        case "update":
            # 0 flags that no specific index was requested
            index = options.modem_storage_index
            if index < 0 or index > MAX_STORAGE_INDEX:
                raise RangeError("invalid modem storage index")
            return UpdateRequest(
                images=options.images,
                device=device,
                open_flags=open_flags,
                firmware_version=options.firmware_version,
                config_version=options.config_version,
                carrier=options.carrier,
                ignore_version_errors=options.ignore_version_errors,
                override_download=options.override_download,
                modem_storage_index=index,
                skip_validation=options.skip_validation,
            )
        case "update-qdl":
            return UpdateQdlRequest(images=options.images, device=device)
        case "reset":
            return ResetRequest(device=device, open_flags=open_flags)
        case _:
            return VerifyRequest(images=options.images)
