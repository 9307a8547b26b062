"""
Collaborators that perform the long running device operations.

The front end only decides what to run. Finding the physical device and
talking QMI or QDL to it is the job of a Backend.
"""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from .errors import SelectionError
from .models import DeviceOpenFlags, DeviceSelectionCriteria
from .utility import run_command

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = "qmi-firmware-update"


class DeviceSelection:
    """
    A resolved device selection, owned by whoever dispatches an operation.

    Use as a context manager so that the selection is released once the
    operation returns, whatever the outcome. A released selection cannot be
    used again.
    """

    def __init__(self, criteria: DeviceSelectionCriteria):
        self.criteria = criteria
        self.released = False

    def release(self) -> None:
        if not self.released:
            logger.debug(f"Releasing device selection: {self.criteria}")
            self.released = True

    def __enter__(self) -> "DeviceSelection":
        if self.released:
            raise SelectionError(f"device selection already released: {self.criteria}")
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self.released else "active"
        return f"DeviceSelection({self.criteria}, {state})"


class Backend(Protocol):
    def resolve_device_selection(
        self, criteria: DeviceSelectionCriteria
    ) -> DeviceSelection:
        """Find the device described by criteria."""
        ...

    def run_update(
        self,
        images: Sequence[Path],
        device: DeviceSelection,
        firmware_version: str | None,
        config_version: str | None,
        carrier: str | None,
        open_flags: DeviceOpenFlags,
        ignore_version_errors: bool,
        override_download: bool,
        modem_storage_index: int,
        skip_validation: bool,
    ) -> bool:
        """Run the full update in normal mode."""
        ...

    def run_update_qdl(self, images: Sequence[Path], device: DeviceSelection) -> bool:
        """Download images to a device in QDL mode."""
        ...

    def run_reset(self, device: DeviceSelection, open_flags: DeviceOpenFlags) -> bool:
        """Reboot the device into QDL download mode."""
        ...

    def run_verify(self, images: Sequence[Path]) -> bool:
        """Analyze and verify firmware images."""
        ...


def selection_args(criteria: DeviceSelectionCriteria) -> list[str]:
    """Command line arguments that select the device described by criteria."""
    match criteria.scheme:
        case "cdc-wdm":
            return ["--cdc-wdm", str(criteria.path)]
        case "tty":
            return ["--tty", str(criteria.path)]
        case "busnum-devnum":
            if criteria.busnum:
                return ["--busnum-devnum", f"{criteria.busnum}:{criteria.devnum}"]
            return ["--busnum-devnum", str(criteria.devnum)]
        case _:
            if criteria.pid:
                return ["--vid-pid", f"{criteria.vid:04x}:{criteria.pid:04x}"]
            return ["--vid-pid", f"{criteria.vid:04x}"]


def open_flags_args(open_flags: DeviceOpenFlags) -> list[str]:
    args = [f"--device-open-{open_flags.mode}"]
    if DeviceOpenFlags.PROXY in open_flags:
        args.append("--device-open-proxy")
    return args


class CommandBackend:
    """Backend that hands each operation to an external flashing tool."""

    def __init__(self, executable: str = DEFAULT_BACKEND, verbose: bool = False):
        self.executable = executable
        self.verbose = verbose

    def _run(self, args: list[str]) -> bool:
        command = [self.executable, *args]
        if self.verbose:
            command.append("--verbose")
        result = run_command(command)
        if result.returncode != 0:
            logger.error(f"{self.executable} failed with exit code {result.returncode}")
            return False
        return True

    def resolve_device_selection(
        self, criteria: DeviceSelectionCriteria
    ) -> DeviceSelection:
        if criteria.path is not None and not criteria.path.exists():
            raise SelectionError(f"couldn't access device path: {criteria.path}")
        logger.info(f"Selected device: {criteria}")
        return DeviceSelection(criteria)

    def run_update(
        self,
        images: Sequence[Path],
        device: DeviceSelection,
        firmware_version: str | None,
        config_version: str | None,
        carrier: str | None,
        open_flags: DeviceOpenFlags,
        ignore_version_errors: bool,
        override_download: bool,
        modem_storage_index: int,
        skip_validation: bool,
    ) -> bool:
        args = ["--update", *selection_args(device.criteria)]
        if firmware_version:
            args += ["--firmware-version", firmware_version]
        if config_version:
            args += ["--config-version", config_version]
        if carrier:
            args += ["--carrier", carrier]
        args += open_flags_args(open_flags)
        if ignore_version_errors:
            args.append("--ignore-version-errors")
        if override_download:
            args.append("--override-download")
        if modem_storage_index:
            args += ["--modem-storage-index", str(modem_storage_index)]
        if skip_validation:
            args.append("--skip-validation")
        args += [str(image) for image in images]

        logger.info(f"Updating {device.criteria} with {len(images)} image(s)")
        return self._run(args)

    def run_update_qdl(self, images: Sequence[Path], device: DeviceSelection) -> bool:
        logger.info(f"Updating {device.criteria} in QDL mode")
        args = ["--update-qdl", *selection_args(device.criteria)]
        return self._run(args + [str(image) for image in images])

    def run_reset(self, device: DeviceSelection, open_flags: DeviceOpenFlags) -> bool:
        logger.info(f"Resetting {device.criteria} into QDL download mode")
        args = ["--reset", *selection_args(device.criteria)]
        return self._run(args + open_flags_args(open_flags))

    def run_verify(self, images: Sequence[Path]) -> bool:
        logger.info(f"Verifying {len(images)} image(s)")
        return self._run(["--verify", *[str(image) for image in images]])
