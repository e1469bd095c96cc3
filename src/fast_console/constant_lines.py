"""Per-frame status lines keyed by their format template."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from typing import Any

ValueProvider = Callable[[], Sequence[Any]]


class ConstantLineRegistry:
    """Map format templates to value providers evaluated every frame.

    The first registration of a template wins. Rendering works on a
    snapshot taken under the lock, so other threads may add or clear
    entries while a frame is being drawn.
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, ValueProvider] = {}
        self._failing: set[str] = set()
        self._logger = logger or logging.getLogger(__name__)

    def add_line(self, template: str, provider: ValueProvider) -> bool:
        """Register `template`; return False if it was already registered."""
        if not callable(provider):
            raise TypeError("provider must be callable")
        with self._lock:
            if template in self._entries:
                return False
            self._entries[template] = provider
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._failing.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, template: object) -> bool:
        with self._lock:
            return template in self._entries

    def render(self) -> list[str]:
        """Format every registered line, skipping the ones that fail this frame."""
        with self._lock:
            entries = list(self._entries.items())

        rendered: list[str] = []
        for template, provider in entries:
            try:
                values = provider()
                if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
                    values = (values,)
                rendered.append(template.format(*values))
            except Exception as exc:
                self._mark_failed(template, exc)
                continue
            self._mark_recovered(template)
        return rendered

    def _mark_failed(self, template: str, exc: Exception) -> None:
        with self._lock:
            if template in self._failing:
                return
            self._failing.add(template)
        self._logger.warning(
            "Constant line %r skipped: %s: %s",
            template,
            type(exc).__name__,
            exc,
            extra={"template": template},
        )

    def _mark_recovered(self, template: str) -> None:
        with self._lock:
            if template not in self._failing:
                return
            self._failing.discard(template)
        self._logger.info(
            "Constant line %r rendering again.", template, extra={"template": template}
        )
