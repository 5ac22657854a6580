"""
Key delivery backends.

Every backend posts one KeyAction to the main window of each running
process whose image name matches the target. Matching processes are found
with psutil; delivery is fire-and-forget, a failure on one process is
logged and the rest still receive the key.

Backends:
    xdotool    - X11, keydown/keyup posted to the process's window
    win32      - Windows, WM_KEYDOWN/WM_KEYUP via PostMessageW
    simulated  - logged and recorded only (demo mode, tests)
"""

import sys
import shutil
import logging
import subprocess
from typing import List

import psutil

from bodynav.core.errors import KeySenderUnavailable
from bodynav.core.types import (
    KeyAction, KeyDirection, VK_C, VK_E, VK_F, VK_LEFT, VK_RIGHT, VK_UP,
)

logger = logging.getLogger(__name__)

# X keysyms for the virtual-key codes the dispatcher uses
XDOTOOL_KEYSYMS = {
    VK_E: "e",
    VK_C: "c",
    VK_F: "f",
    VK_UP: "Up",
    VK_LEFT: "Left",
    VK_RIGHT: "Right",
}

WM_KEYDOWN = 0x0100
WM_KEYUP = 0x0101


def normalize_process_name(name: str) -> str:
    """Compare image names the way the OS does: no ``.exe``, case-insensitive."""
    name = name.strip()
    if name.lower().endswith(".exe"):
        name = name[:-4]
    return name.casefold()


def find_processes(process_name: str) -> List[psutil.Process]:
    """Running processes whose image name matches, in enumeration order."""
    target = normalize_process_name(process_name)
    matches = []
    for proc in psutil.process_iter(["name"]):
        name = proc.info.get("name")
        if name and normalize_process_name(name) == target:
            matches.append(proc)
    return matches


class KeySender:
    """Capability interface: post one key action to every matching process."""

    method = "none"

    def send_key(self, process_name: str, action: KeyAction) -> int:
        """Post ``action`` to all processes named ``process_name``.

        Returns:
            Number of windows the action was posted to
        """
        delivered = 0
        for proc in find_processes(process_name):
            try:
                if self._post(proc, action):
                    delivered += 1
            except (psutil.Error, OSError, subprocess.SubprocessError) as e:
                logger.warning("Key %r to pid %d failed: %s", action, proc.pid, e)
        return delivered

    def _post(self, proc: psutil.Process, action: KeyAction) -> bool:
        raise NotImplementedError


class SimulatedKeySender(KeySender):
    """Logs and records actions without touching any process.

    Nothing is posted, so ``send_key`` reports zero windows; the actions
    are kept in ``sent``.
    """

    method = "simulated"

    def __init__(self):
        self.sent = []  # [(process_name, KeyAction)]

    def send_key(self, process_name: str, action: KeyAction) -> int:
        self.sent.append((process_name, action))
        logger.info("[SIMULATED] %s -> %r", process_name, action)
        return 0


class XdotoolKeySender(KeySender):
    """Posts X key events to each process's first visible window."""

    method = "xdotool"

    def __init__(self, timeout: float = 1.0):
        if shutil.which("xdotool") is None:
            raise KeySenderUnavailable("xdotool not found on PATH")
        self._timeout = timeout

    def _find_window(self, pid: int):
        result = subprocess.run(
            ["xdotool", "search", "--onlyvisible", "--pid", str(pid)],
            stdout=subprocess.PIPE, stderr=subprocess.PIPE,
            timeout=self._timeout,
        )
        windows = result.stdout.decode().split()
        return windows[0] if windows else None

    def _post(self, proc: psutil.Process, action: KeyAction) -> bool:
        keysym = XDOTOOL_KEYSYMS.get(action.vk_code)
        if keysym is None:
            logger.debug("No keysym for vk 0x%02X", action.vk_code)
            return False

        window = self._find_window(proc.pid)
        if window is None:
            logger.debug("Process %d has no visible window", proc.pid)
            return False

        command = "keydown" if action.direction is KeyDirection.PRESS else "keyup"
        result = subprocess.run(
            ["xdotool", command, "--window", window, keysym],
            stdout=subprocess.PIPE, stderr=subprocess.PIPE,
            timeout=self._timeout,
        )
        if result.returncode != 0:
            logger.warning("xdotool %s %s -> window %s failed (exit %d): %s", command, keysym,
                           window, result.returncode, result.stderr.decode(errors="replace").strip())
            return False
        logger.debug("xdotool %s %s -> window %s (pid %d)", command, keysym, window, proc.pid)
        return True


class Win32KeySender(KeySender):
    """Posts WM_KEYDOWN / WM_KEYUP to each process's main window."""

    method = "win32"

    def __init__(self):
        if sys.platform != "win32":
            raise KeySenderUnavailable("win32 key delivery needs Windows")
        import ctypes
        from ctypes import wintypes

        self._ctypes = ctypes
        self._user32 = ctypes.WinDLL("user32", use_last_error=True)
        self._enum_proc = ctypes.WINFUNCTYPE(wintypes.BOOL, wintypes.HWND, wintypes.LPARAM)
        self._user32.PostMessageW.argtypes = [
            wintypes.HWND, wintypes.UINT, wintypes.WPARAM, wintypes.LPARAM,
        ]
        self._user32.PostMessageW.restype = wintypes.BOOL
        self._wintypes = wintypes

    def _main_window(self, pid: int):
        """First visible top-level window without an owner, like .NET's MainWindowHandle."""
        user32 = self._user32
        found = []

        def callback(hwnd, _lparam):
            owner_pid = self._wintypes.DWORD()
            user32.GetWindowThreadProcessId(hwnd, self._ctypes.byref(owner_pid))
            if owner_pid.value == pid and user32.IsWindowVisible(hwnd) \
                    and not user32.GetWindow(hwnd, 4):  # GW_OWNER
                found.append(hwnd)
                return False
            return True

        user32.EnumWindows(self._enum_proc(callback), 0)
        return found[0] if found else None

    def _post(self, proc: psutil.Process, action: KeyAction) -> bool:
        hwnd = self._main_window(proc.pid)
        if hwnd is None:
            logger.debug("Process %d has no main window", proc.pid)
            return False
        message = WM_KEYDOWN if action.direction is KeyDirection.PRESS else WM_KEYUP
        if not self._user32.PostMessageW(hwnd, message, action.vk_code, 0):
            raise OSError(self._ctypes.get_last_error(), "PostMessageW failed")
        return True


_BACKENDS = {
    "xdotool": XdotoolKeySender,
    "win32": Win32KeySender,
    "simulated": SimulatedKeySender,
}


def create_key_sender(method: str = None) -> KeySender:
    """Build the requested backend, falling back to simulated delivery.

    ``None`` or ``"auto"`` picks win32 on Windows and xdotool elsewhere.
    """
    if method in (None, "auto"):
        method = "win32" if sys.platform == "win32" else "xdotool"

    backend = _BACKENDS.get(method)
    if backend is None:
        logger.warning("Unknown control method '%s', keys will be simulated", method)
        return SimulatedKeySender()

    try:
        sender = backend()
    except KeySenderUnavailable as e:
        logger.warning("%s - keys will be simulated (logged only)", e)
        return SimulatedKeySender()

    logger.info("Key sender initialized (method=%s)", sender.method)
    return sender
