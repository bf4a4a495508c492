"""Native file chooser helpers for desktop sessions."""

from __future__ import annotations

import asyncio
import logging
import shutil

LOGGER = logging.getLogger(__name__)

DIALOG_TIMEOUT_SECONDS = 120


def _dialog_commands(title: str) -> list[list[str]]:
    commands: list[list[str]] = []
    zenity_bin = shutil.which("zenity")
    if zenity_bin is not None:
        commands.append([zenity_bin, "--file-selection", f"--title={title}"])
    kdialog_bin = shutil.which("kdialog")
    if kdialog_bin is not None:
        commands.append([kdialog_bin, "--getopenfilename", ".", "--title", title])
    return commands


async def open_native_file_dialog(title: str = "Select document") -> str | None:
    """Return a path chosen in zenity or kdialog, or None.

    None means the user cancelled, the dialog timed out, or no dialog
    backend could be launched. The caller then falls back to an in-app
    prompt.
    """
    for command in _dialog_commands(title):
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            LOGGER.info(
                "file_dialog.unavailable",
                extra={
                    "event": "file_dialog.unavailable",
                    "command": command[0],
                    "reason": str(exc) or type(exc).__name__,
                },
            )
            continue
        try:
            stdout, _ = await asyncio.wait_for(
                proc.communicate(), timeout=DIALOG_TIMEOUT_SECONDS
            )
        except asyncio.TimeoutError:
            LOGGER.info(
                "file_dialog.timeout",
                extra={"event": "file_dialog.timeout", "command": command[0]},
            )
            proc.kill()
            await proc.wait()
            return None
        if proc.returncode == 0:
            path = stdout.decode().strip()
            if path:
                return path
        # A non-zero exit is a cancelled dialog, not a missing backend.
        return None
    return None
