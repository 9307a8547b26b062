"""Pydantic models describing a validated qfu invocation."""

import enum
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

MAX_STORAGE_INDEX = 0xFF


class StrictBaseModel(BaseModel):
    """Base model with strict validation - no extra fields, no mutation."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class DeviceOpenFlags(enum.Flag):
    """Flags used when opening a QMI session; QMI mode sets no mode bit."""

    NONE = 0
    PROXY = 1 << 5
    MBIM = 1 << 6
    AUTO = 1 << 7

    @property
    def mode(self) -> str:
        if DeviceOpenFlags.MBIM in self:
            return "mbim"
        if DeviceOpenFlags.AUTO in self:
            return "auto"
        return "qmi"


class Options(StrictBaseModel):
    """Every flag given on the command line, parsed once per invocation.

    Numeric selectors use 0 to mean "not given", as does the storage index.
    """

    # device selection
    busnum: int = 0
    devnum: int = 0
    vid: int = 0
    pid: int = 0
    cdc_wdm: Path | None = None
    tty: Path | None = None

    # actions
    update: bool = False
    update_qdl: bool = False
    reset: bool = False
    verify: bool = False

    # update
    firmware_version: str | None = None
    config_version: str | None = None
    carrier: str | None = None
    ignore_version_errors: bool = False
    override_download: bool = False
    modem_storage_index: int = 0
    skip_validation: bool = False

    # device open
    device_open_proxy: bool = False
    device_open_qmi: bool = False
    device_open_mbim: bool = False
    device_open_auto: bool = False

    images: tuple[Path, ...] = ()


class DeviceSelectionCriteria(StrictBaseModel):
    """The single scheme used to find the target device."""

    scheme: Literal["cdc-wdm", "tty", "busnum-devnum", "vid-pid"]
    path: Path | None = None
    busnum: int = 0
    devnum: int = 0
    vid: int = 0
    pid: int = 0

    def __str__(self) -> str:
        match self.scheme:
            case "cdc-wdm" | "tty":
                return f"{self.scheme} {self.path}"
            case "busnum-devnum":
                if self.busnum:
                    return f"bus {self.busnum} dev {self.devnum}"
                return f"dev {self.devnum}"
            case _:
                if self.pid:
                    return f"vid {self.vid:04x} pid {self.pid:04x}"
                return f"vid {self.vid:04x}"


class UpdateRequest(StrictBaseModel):
    """Run the full firmware update in normal (QMI) mode."""

    action: Literal["update"] = "update"
    images: tuple[Path, ...] = Field(min_length=1)
    device: DeviceSelectionCriteria
    open_flags: DeviceOpenFlags
    firmware_version: str | None = None
    config_version: str | None = None
    carrier: str | None = None
    ignore_version_errors: bool = False
    override_download: bool = False
    modem_storage_index: int = Field(0, ge=0, le=MAX_STORAGE_INDEX)
    skip_validation: bool = False


class UpdateQdlRequest(StrictBaseModel):
    """Download images to a device already in QDL mode."""

    action: Literal["update-qdl"] = "update-qdl"
    images: tuple[Path, ...] = Field(min_length=1)
    device: DeviceSelectionCriteria


class ResetRequest(StrictBaseModel):
    """Reboot a device into QDL download mode."""

    action: Literal["reset"] = "reset"
    device: DeviceSelectionCriteria
    open_flags: DeviceOpenFlags


class VerifyRequest(StrictBaseModel):
    """Analyze and verify firmware images, no device involved."""

    action: Literal["verify"] = "verify"
    images: tuple[Path, ...] = Field(min_length=1)


ActionRequest = Annotated[
    UpdateRequest | UpdateQdlRequest | ResetRequest | VerifyRequest,
    Field(discriminator="action"),
]
