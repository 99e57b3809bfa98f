from dataclasses import dataclass

FILLED = "▰"
EMPTY = "▱"


@dataclass(frozen=True)
class Progress:
    current: int
    total: int
    percentage: int

    @property
    def label(self) -> str:
        return f"Question {self.current} of {self.total}"


def progress_for(current: int, total: int) -> Progress:
    """Position of the 1-based ``current`` question within ``total``."""
    if total <= 0:
        return Progress(current=0, total=0, percentage=0)
    current = min(max(current, 1), total)
    percentage = round(current / total * 100)
    return Progress(current=current, total=total, percentage=min(max(percentage, 0), 100))


def render_progress_bar(progress: Progress, width: int = 10) -> str:
    filled = round(progress.percentage / 100 * width)
    return f"{FILLED * filled}{EMPTY * (width - filled)} {progress.percentage}% Complete"
