"""
External image-to-glyph renderers.

Two interchangeable command-line tools turn an image file into terminal text:
- chafa: block-graphic symbols, several colour depths
- viu: Unicode half-block cells in true colour

Each backend is probed once for its executable; resolve_backends() turns the
user's choice into the ordered list the pipeline should try.
"""
from __future__ import annotations

import logging
import os
import shutil
import signal
import subprocess
import sys
from typing import Callable

from ..settings import ImageMode

logger = logging.getLogger(__name__)

Probe = Callable[[str], "str | None"]


class RendererError(Exception):
    """The external renderer was missing, timed out, or exited with an error."""


def _kill_process_tree(proc: subprocess.Popen) -> None:
    if sys.platform == "win32":
        proc.kill()
        return
    try:
        os.killpg(os.getpgid(proc.pid), signal.SIGKILL)
    except ProcessLookupError:
        pass
    except OSError:
        proc.kill()


class RendererBackend:
    """Base class: build a command line, run it under a timeout, return stdout."""

    name: str = ""
    executable: str = ""

    def __init__(self, timeout: float = 5.0, probe: Probe = shutil.which) -> None:
        self.timeout = timeout
        self._probe = probe
        self._path: str | None = None
        self._probed = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(timeout={self.timeout})"

    def is_available(self) -> bool:
        if not self._probed:
            self._path = self._probe(self.executable)
            self._probed = True
        return self._path is not None

    def keeps_color(self, mode: ImageMode) -> bool:
        return mode != "mono"

    def build_command(self, path: str, width: int, height: int, mode: ImageMode) -> list[str]:
        raise NotImplementedError

    def render(self, path: str, width: int, height: int, mode: ImageMode) -> str:
        if not self.is_available():
            raise RendererError(f"{self.executable} is not installed")
        cmd = self.build_command(path, width, height, mode)
        cmd[0] = self._path or cmd[0]

        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=sys.platform != "win32",
            )
        except OSError as e:
            raise RendererError(f"{self.name}: {e}") from e

        try:
            stdout, stderr = proc.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            _kill_process_tree(proc)
            proc.communicate()
            raise RendererError(f"{self.name} timed out after {self.timeout}s") from e

        if proc.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise RendererError(f"{self.name} exited with {proc.returncode}: {detail}")
        return stdout.decode("utf-8", errors="replace")


class ChafaBackend(RendererBackend):
    name = "chafa"
    executable = "chafa"

    _COLORS = {"mono": "none", "color": "256", "truecolor": "full"}

    def build_command(self, path: str, width: int, height: int, mode: ImageMode) -> list[str]:
        symbols = "ascii" if mode == "mono" else "block+border+space"
        return [
            self.executable,
            "--format=symbols",
            f"--size={width}x{height}",
            f"--colors={self._COLORS[mode]}",
            f"--symbols={symbols}",
            "--animate=off",
            "--polite=on",
            path,
        ]


class ViuBackend(RendererBackend):
    name = "viu"
    executable = "viu"

    def build_command(self, path: str, width: int, height: int, mode: ImageMode) -> list[str]:
        # -b forces half-block output instead of a graphics protocol
        return [self.executable, "-b", "-w", str(width), "-h", str(height), path]


BACKEND_TYPES: dict[str, type[RendererBackend]] = {
    "chafa": ChafaBackend,
    "viu": ViuBackend,
}
AUTO_ORDER: tuple[str, ...] = ("chafa", "viu")


def resolve_backends(
    choice: str,
    timeout: float = 5.0,
    probe: Probe = shutil.which,
) -> list[RendererBackend]:
    """
    Backends to try, in order.

    "off" gives none; an explicit name gives that backend alone, or none when
    it is not installed; "auto" gives every installed backend in AUTO_ORDER.
    """
    if choice == "off":
        return []
    if choice in BACKEND_TYPES:
        backend = BACKEND_TYPES[choice](timeout=timeout, probe=probe)
        if backend.is_available():
            return [backend]
        logger.warning("Image backend %s is not installed; previews disabled", choice)
        return []
    if choice != "auto":
        logger.warning("Unknown image backend %r; previews disabled", choice)
        return []

    available = []
    for name in AUTO_ORDER:
        backend = BACKEND_TYPES[name](timeout=timeout, probe=probe)
        if backend.is_available():
            available.append(backend)
    if not available:
        logger.debug("No image backend found on PATH")
    return available
