"""Interface for ``python -m qfu``."""

import logging
from collections.abc import Sequence
from pathlib import Path

import typer

from . import __version__
from .actions import build_action_request
from .backend import CommandBackend
from .config import get_config
from .dispatch import dispatch
from .errors import QfuError
from .identifiers import parse_busnum_devnum_tokens, parse_vid_pid_tokens
from .logs import log_session
from .models import Options

__all__ = ["main"]

PROGRAM_NAME = "qfu"

app = typer.Typer(
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)
logger = logging.getLogger(__name__)

EPILOG = (
    "Warning! Use this program with caution. The authors take *no* "
    "responsibility if any device gets broken as a result of using it."
)

HELP_EXAMPLES = f"""
Example 1: Updating a Sierra Wireless MC7354.

 The firmware is usually a core system image (.cwe) plus a carrier specific
 image (.nvu), flashed in the same operation. They may also come combined in
 a single .spk file.

 1a) Select the device by vid:pid (fails if several devices match):
 $ sudo {PROGRAM_NAME} --update -d 1199:68c0 \\
       SWI9X15C_05.05.58.00.cwe \\
       SWI9X15C_05.05.58.00_Generic_005.025_002.nvu

 1b) Select an explicit QMI cdc-wdm device:
 $ sudo {PROGRAM_NAME} --update --cdc-wdm /dev/cdc-wdm0 \\
       SWI9X15C_05.05.58.00.cwe \\
       SWI9X15C_05.05.58.00_Generic_005.025_002.nvu

 1c) Give explicit firmware, config and carrier strings:
 $ sudo {PROGRAM_NAME} --update -d 1199:68c0 \\
       --firmware-version 05.05.58.00 \\
       --config-version 005.025_002 \\
       --carrier Generic \\
       SWI9X15C_05.05.58.00.cwe \\
       SWI9X15C_05.05.58.00_Generic_005.025_002.nvu

Example 2: Manual update of a Sierra Wireless MC7700.

 2a) Request the device to go into QDL download mode:
 $ sudo {PROGRAM_NAME} -d 1199:68a2 --reset

 2b) Run the update while in QDL download mode:
 $ sudo {PROGRAM_NAME} -d 1199:68a2 --update-qdl \\
       9999999_9999999_9200_03.05.14.00_00_generic_000.000_001_SPKG_MC.cwe

Example 3: Verify firmware images.

 $ {PROGRAM_NAME} --verify \\
       SWI9X15C_05.05.58.00.cwe \\
       SWI9X15C_05.05.58.00_Generic_005.025_002.nvu
"""


def version_callback(value: bool) -> None:
    """Output version and exit."""
    if value:
        typer.echo(f"{PROGRAM_NAME} {__version__}")
        raise typer.Exit()


def help_examples_callback(value: bool) -> None:
    """Output usage examples and exit."""
    if value:
        typer.echo(HELP_EXAMPLES)
        raise typer.Exit()


@app.command(epilog=EPILOG)
def run(
    images: list[Path] | None = typer.Argument(
        None, metavar="FILE1 FILE2...", show_default=False
    ),
    # device selection
    busnum_devnum: list[str] | None = typer.Option(
        None,
        "--busnum-devnum",
        "-s",
        metavar="[BUS:]DEV",
        help="Select device by bus and device number (in decimal).",
    ),
    vid_pid: list[str] | None = typer.Option(
        None,
        "--vid-pid",
        "-d",
        metavar="VID[:PID]",
        help="Select device by device vendor and product id (in hexadecimal).",
    ),
    cdc_wdm: Path | None = typer.Option(
        None,
        "--cdc-wdm",
        "-w",
        help="Select device by QMI/MBIM cdc-wdm device path (e.g. /dev/cdc-wdm0).",
    ),
    tty: Path | None = typer.Option(
        None,
        "--tty",
        "-t",
        help="Select device by serial device path (e.g. /dev/ttyUSB2).",
    ),
    # update
    update: bool = typer.Option(
        False, "--update", "-u", help="Launch firmware update process."
    ),
    firmware_version: str | None = typer.Option(
        None,
        "--firmware-version",
        "-f",
        help="Firmware version (e.g. '05.05.58.00').",
    ),
    config_version: str | None = typer.Option(
        None,
        "--config-version",
        "-c",
        help="Config version (e.g. '005.025_002').",
    ),
    carrier: str | None = typer.Option(
        None, "--carrier", "-C", help="Carrier name (e.g. 'Generic')."
    ),
    ignore_version_errors: bool = typer.Option(
        False,
        "--ignore-version-errors",
        help="Run update operation even with version string errors.",
    ),
    override_download: bool = typer.Option(
        False,
        "--override-download",
        help="Download images even if module says it already has them.",
    ),
    modem_storage_index: int = typer.Option(
        0,
        "--modem-storage-index",
        metavar="INDEX",
        help="Index storage for the modem image.",
    ),
    skip_validation: bool = typer.Option(
        False,
        "--skip-validation",
        help="Don't wait to validate the running firmware after update.",
    ),
    # other actions
    reset: bool = typer.Option(
        False, "--reset", "-b", help="Reset device into QDL download mode."
    ),
    update_qdl: bool = typer.Option(
        False,
        "--update-qdl",
        "-U",
        help="Launch firmware update process in QDL mode.",
    ),
    verify: bool = typer.Option(
        False, "--verify", "-z", help="Analyze and verify firmware images."
    ),
    # device open
    device_open_proxy: bool = typer.Option(
        False,
        "--device-open-proxy",
        "-p",
        help="Request to use the 'qmi-proxy' proxy.",
    ),
    device_open_qmi: bool = typer.Option(
        False,
        "--device-open-qmi",
        help="Open a cdc-wdm device explicitly in QMI mode.",
    ),
    device_open_mbim: bool = typer.Option(
        False,
        "--device-open-mbim",
        help="Open a cdc-wdm device explicitly in MBIM mode.",
    ),
    device_open_auto: bool = typer.Option(
        False,
        "--device-open-auto",
        help="Open a cdc-wdm device in either QMI or MBIM mode (default).",
    ),
    # logging
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Run action with verbose messages in standard output, "
        "including the debug ones.",
    ),
    silent: bool = typer.Option(
        False,
        "--silent",
        "-S",
        help="Run action with no messages in standard output; "
        "not even the error ones.",
    ),
    verbose_log: Path | None = typer.Option(
        None,
        "--verbose-log",
        "-L",
        help="Write verbose messages to an output file.",
    ),
    # informational
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Print version.",
    ),
    help_examples: bool = typer.Option(
        False,
        "--help-examples",
        "-H",
        callback=help_examples_callback,
        is_eager=True,
        help="Show help examples.",
    ),
) -> None:
    """Update firmware in QMI devices."""
    try:
        busdev = parse_busnum_devnum_tokens(busnum_devnum or [])
        vidpid = parse_vid_pid_tokens(vid_pid or [])
    except QfuError as e:
        fail(f"couldn't parse options: {e}")

    config = get_config()
    options = Options(
        busnum=busdev.busnum if busdev else 0,
        devnum=busdev.devnum if busdev else 0,
        vid=vidpid.vid if vidpid else 0,
        pid=vidpid.pid if vidpid else 0,
        cdc_wdm=cdc_wdm,
        tty=tty,
        update=update,
        update_qdl=update_qdl,
        reset=reset,
        verify=verify,
        firmware_version=firmware_version,
        config_version=config_version,
        carrier=carrier,
        ignore_version_errors=ignore_version_errors,
        override_download=override_download,
        modem_storage_index=modem_storage_index,
        skip_validation=skip_validation,
        device_open_proxy=device_open_proxy or config.device_open_proxy,
        device_open_qmi=device_open_qmi,
        device_open_mbim=device_open_mbim,
        device_open_auto=device_open_auto,
        images=tuple(images or ()),
    )

    try:
        with log_session(verbose, silent, verbose_log or config.verbose_log):
            try:
                request = build_action_request(options)
                backend = CommandBackend(config.backend, verbose=verbose)
                result = dispatch(request, backend)
            except QfuError as e:
                logger.debug(f"Invocation rejected: {e!r}")
                raise
    except QfuError as e:
        fail(str(e))

    if not result:
        raise typer.Exit(1)


def fail(message: str) -> None:
    """Report an error on stderr and exit with failure."""
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(1)


def main(args: Sequence[str] | None = None) -> None:
    """Argument parser for the CLI."""
    app(args=args, prog_name=PROGRAM_NAME)


if __name__ == "__main__":
    main()
