"""
Turning the raw selection and open mode flags into one device selection
criteria and one set of device open flags.
"""

import logging
from pathlib import Path

from .errors import ConfigError, SelectionError
from .models import DeviceOpenFlags, DeviceSelectionCriteria

logger = logging.getLogger(__name__)


def build_device_selection(
    cdc_wdm: Path | None = None,
    tty: Path | None = None,
    vid: int = 0,
    pid: int = 0,
    busnum: int = 0,
    devnum: int = 0,
) -> DeviceSelectionCriteria:
    """
    Build the criteria used to find the target device.

    When several schemes are given, the first one in this order wins:
    1. cdc-wdm device path
    2. tty device path
    3. bus and device number
    4. vendor and product id

    The ignored schemes are reported with a warning.

    Args:
        cdc_wdm: QMI/MBIM control port path, e.g. /dev/cdc-wdm0
        tty: serial port path, e.g. /dev/ttyUSB2
        vid: vendor id, 0 if not given
        pid: product id, 0 if not given
        busnum: bus number, 0 if not given
        devnum: device number, 0 if not given

    Returns:
        DeviceSelectionCriteria for the winning scheme

    Raises:
        SelectionError: If no scheme was given at all
    """
    candidates: list[DeviceSelectionCriteria] = []
    if cdc_wdm:
        candidates.append(DeviceSelectionCriteria(scheme="cdc-wdm", path=cdc_wdm))
    if tty:
        candidates.append(DeviceSelectionCriteria(scheme="tty", path=tty))
    if devnum:
        candidates.append(
            DeviceSelectionCriteria(
                scheme="busnum-devnum", busnum=busnum, devnum=devnum
            )
        )
    if vid:
        candidates.append(DeviceSelectionCriteria(scheme="vid-pid", vid=vid, pid=pid))

    if not candidates:
        raise SelectionError("no device specified")

    selected = candidates[0]
    if len(candidates) > 1:
        ignored = ", ".join(str(c) for c in candidates[1:])
        logger.warning(f"Multiple device selections given, using {selected}")
        logger.warning(f"Ignoring device selection: {ignored}")

    logger.debug(f"Device selection: {selected}")
    return selected


def resolve_open_flags(
    proxy: bool = False,
    qmi: bool = False,
    mbim: bool = False,
    auto: bool = False,
) -> DeviceOpenFlags:
    """
    Merge the device open flags into one value.

    At most one of qmi, mbim and auto may be requested. Requesting none of
    them means auto. Proxy combines with any mode.

    Raises:
        ConfigError: If more than one mode flag was requested
    """
    if qmi + mbim + auto > 1:
        raise ConfigError("cannot specify multiple mode flags to open device")

    flags = DeviceOpenFlags.NONE
    if proxy:
        flags |= DeviceOpenFlags.PROXY
    if mbim:
        flags |= DeviceOpenFlags.MBIM
    if auto or (not qmi and not mbim):
        flags |= DeviceOpenFlags.AUTO

    logger.debug(f"Device open flags: {flags.mode} mode, proxy={proxy}")
    return flags
