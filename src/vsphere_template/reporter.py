# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Progress reporting for a post-processor run.

Steps talk to the user through a :class:`Reporter`.  The build harness
normally supplies its own; :class:`LoggingReporter` and
:class:`ConsoleReporter` cover running standalone.
"""

from __future__ import annotations

import logging
from typing import Protocol

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)


class Reporter(Protocol):
    def info(self, msg: str) -> None: ...

    def dim(self, msg: str) -> None: ...

    def warning(self, msg: str) -> None: ...

    def error(self, msg: str) -> None: ...


class LoggingReporter:
    """Reporter that forwards everything to :mod:`logging`."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def info(self, msg: str) -> None:
        self._log.info(msg)

    def dim(self, msg: str) -> None:
        self._log.debug(msg)

    def warning(self, msg: str) -> None:
        self._log.warning(msg)

    def error(self, msg: str) -> None:
        self._log.error(msg)


class ConsoleReporter:
    """Reporter that prints to the terminal with rich."""

    def __init__(self, console: Console | None = None, prefix: str = "vsphere-template") -> None:
        self._console = console or Console(stderr=True, highlight=False)
        self._prefix = prefix

    def info(self, msg: str) -> None:
        self._console.print(f"[bold]{self._prefix}:[/bold] {escape(msg)}", markup=True)

    def dim(self, msg: str) -> None:
        self._console.print(f"[dim]{self._prefix}: {escape(msg)}[/dim]", markup=True)

    def warning(self, msg: str) -> None:
        self._console.print(f"[yellow]{self._prefix}: {escape(msg)}[/yellow]", markup=True)

    def error(self, msg: str) -> None:
        self._console.print(f"[bold red]{self._prefix}: {escape(msg)}[/bold red]", markup=True)
