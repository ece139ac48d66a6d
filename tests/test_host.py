"""
Tests for core.host — reboot flag and package-manager lock probe.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import errno
import subprocess
import tempfile
import unittest
from unittest import mock

from core.host import HostLockProbe, reboot_required

HOLD_LOCK = (
    "import fcntl, os, sys\n"
    "fd = os.open(sys.argv[1], os.O_RDWR)\n"
    "fcntl.lockf(fd, fcntl.LOCK_EX)\n"
    "print('locked', flush=True)\n"
    "sys.stdin.read()\n"
)


class TestRebootRequired(unittest.TestCase):

    def test_flag_presence(self):
        with tempfile.TemporaryDirectory() as tmp:
            flag = Path(tmp) / "reboot-required"
            self.assertFalse(reboot_required(flag))
            flag.write_text("*** System restart required ***\n")
            self.assertTrue(reboot_required(flag))


class TestHostLockProbe(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.lock = Path(self._tmp.name) / "lock-frontend"
        self.lock.write_text("")

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_paths_are_not_held(self):
        probe = HostLockProbe([Path(self._tmp.name) / "nope"])
        self.assertIsNone(probe.held_by_other())

    def test_free_lock(self):
        self.assertIsNone(HostLockProbe([self.lock]).held_by_other())

    def test_lock_held_by_other_process(self):
        holder = subprocess.Popen(
            [sys.executable, "-c", HOLD_LOCK, str(self.lock)],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            text=True,
        )
        try:
            self.assertEqual(holder.stdout.readline().strip(), "locked")
            self.assertEqual(HostLockProbe([self.lock]).held_by_other(), self.lock)
        finally:
            holder.stdin.close()
            holder.wait(timeout=10)
            holder.stdout.close()
        self.assertIsNone(HostLockProbe([self.lock]).held_by_other())

    def test_unprivileged_falls_back_to_fuser(self):
        probe = HostLockProbe([self.lock])
        with mock.patch("core.host.os.open", side_effect=PermissionError), \
                mock.patch("core.host.subprocess.run") as run:
            run.return_value = subprocess.CompletedProcess(["fuser"], 0, " 1234", "")
            self.assertEqual(probe.held_by_other(), self.lock)
            run.return_value = subprocess.CompletedProcess(["fuser"], 1, "", "")
            self.assertIsNone(probe.held_by_other())
        self.assertEqual(run.call_args[0][0], ["fuser", str(self.lock)])

    def test_missing_fuser_means_not_held(self):
        probe = HostLockProbe([self.lock])
        with mock.patch("core.host.os.open", side_effect=PermissionError), \
                mock.patch("core.host.subprocess.run", side_effect=FileNotFoundError("fuser")):
            self.assertIsNone(probe.held_by_other())

    def test_unexpected_lockf_error_is_not_fatal(self):
        probe = HostLockProbe([self.lock])
        failure = OSError(errno.ENOLCK, "No locks available")
        with mock.patch("core.host.fcntl.lockf", side_effect=failure), \
                self.assertLogs("core.host", level="WARNING"):
            self.assertIsNone(probe.held_by_other())

    def test_unexpected_open_error_is_not_fatal(self):
        probe = HostLockProbe([self.lock])
        failure = OSError(errno.EROFS, "Read-only file system")
        with mock.patch("core.host.os.open", side_effect=failure), \
                self.assertLogs("core.host", level="WARNING"):
            self.assertIsNone(probe.held_by_other())


if __name__ == "__main__":
    unittest.main()
