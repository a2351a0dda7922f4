"""Cursor state of the interactive session.

All three indices point into the current cycle's process sequence, which is
rebuilt every poll. They are re-clamped against the new process count each
cycle and bounds-checked again before any lookup.
"""

from dataclasses import dataclass, replace

from proctop.models import ProcessSample


@dataclass(slots=True, frozen=True)
class SessionState:
    """Scroll offset, highlighted row and committed selection."""

    scroll_offset: int = 0
    highlight_index: int = 0
    selected_index: int | None = None

    def move_up(self) -> "SessionState":
        if self.highlight_index <= 0:
            return self
        highlight = self.highlight_index - 1
        scroll = min(self.scroll_offset, highlight)
        return replace(self, highlight_index=highlight, scroll_offset=scroll)

    def move_down(self, process_count: int, visible_rows: int) -> "SessionState":
        if self.highlight_index >= process_count - 1:
            return self
        highlight = self.highlight_index + 1
        scroll = self.scroll_offset
        if highlight >= scroll + visible_rows:
            scroll = highlight - visible_rows + 1
        return replace(self, highlight_index=highlight, scroll_offset=scroll)

    def confirm(self) -> "SessionState":
        return replace(self, selected_index=self.highlight_index)

    def reconcile(self, process_count: int, visible_rows: int) -> "SessionState":
        """
        Clamp every index into the range of a process sequence of this size.

        A selection that no longer fits is dropped. With no processes the
        cursor rests at 0 and there is no selection.
        """
        if process_count <= 0:
            return SessionState()

        visible_rows = max(1, visible_rows)
        highlight = min(max(self.highlight_index, 0), process_count - 1)
        scroll = min(max(self.scroll_offset, 0), highlight)
        if highlight >= scroll + visible_rows:
            scroll = highlight - visible_rows + 1

        selected = self.selected_index
        if selected is not None and not 0 <= selected < process_count:
            selected = None

        return SessionState(scroll_offset=scroll, highlight_index=highlight, selected_index=selected)

    def selected(self, processes: tuple[ProcessSample, ...]) -> ProcessSample | None:
        """Return the selected process, or None if there is no valid selection."""
        index = self.selected_index
        if index is None or not 0 <= index < len(processes):
            return None
        return processes[index]

    def visible(self, processes: tuple[ProcessSample, ...], visible_rows: int) -> range:
        """Indices of the rows that fit in the window."""
        start = min(self.scroll_offset, len(processes))
        return range(start, min(len(processes), start + max(0, visible_rows)))
