"""
Test doubles for the command runner and host collaborators.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from backends.base import CommandResult, CommandRunner


class FakeRunner(CommandRunner):
    """
    Records every command and answers from a table of canned results.

    ``responses`` maps an argument prefix (tuple) to a CommandResult or to
    a list of CommandResults consumed in order. The longest matching
    prefix wins; unmatched commands succeed with empty output.
    """

    def __init__(self, responses=None, missing=()):
        self.responses = dict(responses or {})
        self.missing = set(missing)
        self.calls = []

    def run(self, args, timeout=None, env=None):
        if isinstance(args, (str, bytes)):
            raise TypeError("Command must be a sequence of arguments, not a string")
        argv = list(args)
        self.calls.append(argv)
        best = None
        for prefix in self.responses:
            if tuple(argv[:len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            return CommandResult(0, "", "")
        response = self.responses[best]
        if isinstance(response, list):
            return response.pop(0) if len(response) > 1 else response[0]
        return response

    def which(self, executable):
        if executable in self.missing:
            return None
        return f"/usr/bin/{executable}"

    def commands_starting(self, *prefix):
        return [c for c in self.calls if tuple(c[:len(prefix)]) == prefix]


APT_LISTING = (
    "Listing... Done\n"
    "openssl-dev/jammy-updates 3.0.2-0ubuntu1.12 amd64 [upgradable from: 3.0.2-0ubuntu1.10]\n"
    "firefox/jammy-updates 120.0+build2 amd64 [upgradable from: 119.0+build1]\n"
    "systemd-lib/jammy-updates 249.11-0ubuntu3.12 amd64 [upgradable from: 249.11-0ubuntu3.11]\n"
)

SNAP_LISTING = (
    "Name      Version  Rev   Size   Publisher   Notes\n"
    "code      1.85.0   150   300MB  vscode**    classic\n"
    "spotify   1.2.26   73    180MB  spotify**   -\n"
)

FLATPAK_LISTING = "org.gimp.GIMP\norg.videolan.VLC\n"

NPM_LISTING = (
    '{\n'
    '  "typescript": {"current": "5.2.2", "wanted": "5.3.3", "latest": "5.3.3"},\n'
    '  "npm": {"current": "10.1.0", "wanted": "10.2.5", "latest": "10.2.5"}\n'
    '}\n'
)

PIP_LISTING = (
    '[{"name": "requests", "version": "2.30.0", "latest_version": "2.31.0", "latest_filetype": "wheel"},'
    ' {"name": "pip", "version": "23.2", "latest_version": "23.3.2", "latest_filetype": "wheel"}]'
)


class FakeProbe:
    """Host package-manager lock probe with a fixed answer."""

    def __init__(self, held=None):
        self.held = held

    def held_by_other(self):
        return self.held


# apt-get as launched through sudo, with its environment on the command line
APT_GET = ("sudo", "env", "DEBIAN_FRONTEND=noninteractive", "LC_ALL=C", "apt-get")
