"""
Command runner — every external tool (gsettings, systemctl, gnome-extensions,
identify) goes through here. Never raises: a missing tool or a crash comes
back as a CompletedProcess with a non-zero return code.
"""

import logging
import os
import shutil
import subprocess

log = logging.getLogger(__name__)


def command_exists(name):
    return shutil.which(name) is not None


def run_cmd(cmd, check=False, timeout=30):
    """Run a command, capture text output, and return the CompletedProcess."""
    log.debug("run cmd=%s", " ".join(cmd))
    try:
        return subprocess.run(
            cmd, capture_output=True, text=True, check=check, timeout=timeout
        )
    except FileNotFoundError:
        return subprocess.CompletedProcess(cmd, 127, "", f"command not found: {cmd[0]}")
    except subprocess.CalledProcessError as e:
        return subprocess.CompletedProcess(cmd, e.returncode, e.stdout or "", e.stderr or "")
    except (subprocess.TimeoutExpired, OSError) as e:
        return subprocess.CompletedProcess(cmd, 1, "", str(e))


def is_wayland():
    """True when the current session runs on Wayland."""
    return os.environ.get("XDG_SESSION_TYPE", "") == "wayland"
