"""Pane names and display modes"""

import enum


class PaneName(enum.StrEnum):
    """One of the two tailed streams"""

    STDOUT = "stdout"
    STDERR = "stderr"

    @property
    def label(self) -> str:
        """Title shown in the pane header"""
        return self.value.upper()

    @property
    def other(self) -> "PaneName":
        """The opposite pane"""
        return PaneName.STDERR if self is PaneName.STDOUT else PaneName.STDOUT


class TailMode(enum.StrEnum):
    """Which streams are on screen"""

    BOTH = "both"
    STDOUT = "stdout"
    STDERR = "stderr"

    @property
    def panes(self) -> tuple[PaneName, ...]:
        """Panes visible in this mode"""
        if self is TailMode.STDOUT:
            return (PaneName.STDOUT,)
        if self is TailMode.STDERR:
            return (PaneName.STDERR,)
        return (PaneName.STDOUT, PaneName.STDERR)

    @classmethod
    def single(cls, pane: PaneName) -> "TailMode":
        """The single-pane mode showing a pane"""
        return cls(pane.value)
