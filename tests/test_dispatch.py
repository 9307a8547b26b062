"""Unit tests for dispatching a request to the backend."""

from pathlib import Path

import pytest

from qfu.backend import DeviceSelection
from qfu.dispatch import dispatch
from qfu.errors import SelectionError
from qfu.models import (
    DeviceOpenFlags,
    DeviceSelectionCriteria,
    ResetRequest,
    UpdateQdlRequest,
    UpdateRequest,
    VerifyRequest,
)

IMAGES = (Path("file1.cwe"), Path("file2.nvu"))
DEVICE = DeviceSelectionCriteria(scheme="vid-pid", vid=0x1199, pid=0x68C0)


class FakeBackend:
    """Backend recording every call, returning a fixed result."""

    def __init__(self, result: bool = True, fail_with: Exception | None = None):
        self.result = result
        self.fail_with = fail_with
        self.calls: list[tuple] = []
        self.selections: list[DeviceSelection] = []

    def resolve_device_selection(self, criteria):
        selection = DeviceSelection(criteria)
        self.selections.append(selection)
        return selection

    def _record(self, *call):
        self.calls.append(call)
        if self.fail_with:
            raise self.fail_with
        return self.result

    def run_update(self, images, device, *args):
        assert not device.released
        return self._record("update", images, device.criteria, *args)

    def run_update_qdl(self, images, device):
        assert not device.released
        return self._record("update-qdl", images, device.criteria)

    def run_reset(self, device, open_flags):
        assert not device.released
        return self._record("reset", device.criteria, open_flags)

    def run_verify(self, images):
        return self._record("verify", images)


@pytest.fixture
def backend():
    return FakeBackend()


class TestDispatch:
    """Each request runs exactly one matching operation."""

    def test_update(self, backend):
        request = UpdateRequest(
            images=IMAGES,
            device=DEVICE,
            open_flags=DeviceOpenFlags.AUTO,
            carrier="Generic",
            modem_storage_index=2,
        )
        assert dispatch(request, backend) is True
        assert backend.calls == [
            (
                "update",
                IMAGES,
                DEVICE,
                None,
                None,
                "Generic",
                DeviceOpenFlags.AUTO,
                False,
                False,
                2,
                False,
            )
        ]

    def test_update_qdl(self, backend):
        dispatch(UpdateQdlRequest(images=IMAGES, device=DEVICE), backend)
        assert backend.calls == [("update-qdl", IMAGES, DEVICE)]

    def test_reset(self, backend):
        flags = DeviceOpenFlags.PROXY | DeviceOpenFlags.MBIM
        dispatch(ResetRequest(device=DEVICE, open_flags=flags), backend)
        assert backend.calls == [("reset", DEVICE, flags)]

    def test_verify_needs_no_device(self, backend):
        dispatch(VerifyRequest(images=IMAGES), backend)
        assert backend.calls == [("verify", IMAGES)]
        assert backend.selections == []

    def test_failure_is_passed_through(self):
        backend = FakeBackend(result=False)
        assert dispatch(UpdateQdlRequest(images=IMAGES, device=DEVICE), backend) is False
        assert len(backend.calls) == 1


class TestDeviceSelectionRelease:
    """The device selection is released on every path."""

    def test_released_on_success(self, backend):
        dispatch(ResetRequest(device=DEVICE, open_flags=DeviceOpenFlags.AUTO), backend)
        assert [s.released for s in backend.selections] == [True]

    def test_released_on_failure(self):
        backend = FakeBackend(result=False)
        dispatch(ResetRequest(device=DEVICE, open_flags=DeviceOpenFlags.AUTO), backend)
        assert [s.released for s in backend.selections] == [True]

    def test_released_on_exception(self):
        backend = FakeBackend(fail_with=RuntimeError("device vanished"))
        with pytest.raises(RuntimeError):
            dispatch(UpdateQdlRequest(images=IMAGES, device=DEVICE), backend)
        assert [s.released for s in backend.selections] == [True]

    def test_released_selection_cannot_be_reused(self):
        selection = DeviceSelection(DEVICE)
        with selection:
            pass
        with pytest.raises(SelectionError, match="already released"):
            with selection:
                pass
