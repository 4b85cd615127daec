from typing import List, Optional

from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from owntime.owntime_arguments import OwnTimeArguments
from owntime.owntime_statistics import FrameCounts


class OwnTimeOutput:

    # Threshold for highlighting frames in red.
    highlight_percentage = 33

    # Color for highlighted text (over the threshold of samples)
    highlight_color = "bold red"

    # Color for the percentage column
    percent_color = "blue"

    def __init__(self, args: Optional[OwnTimeArguments] = None) -> None:
        if args is None:
            args = OwnTimeArguments()
        self.percent_threshold = args.percent_threshold
        self.column_width = args.column_width

    def format_frame_counts(self, fcs: FrameCounts) -> str:
        """One line per frame: rank, percent of samples, and the frame."""
        lines: List[str] = []
        for rank, percent, frame, _count in fcs.percentages(self.percent_threshold):
            lines.append(f"{f'[{rank}]':>4} {percent:3d}% => {frame}")
        return "".join(line + "\n" for line in lines)

    def output_frame_counts(
        self,
        fcs: FrameCounts,
        console: Optional[Console] = None,
        title: str = "",
    ) -> bool:
        """Print the counts as a table; False if nothing was above threshold."""
        rows = list(fcs.percentages(self.percent_threshold))
        if not rows:
            return False
        if console is None:
            console = Console(width=self.column_width)

        tbl = Table(
            box=box.MINIMAL_HEAVY_HEAD,
            title=title or f"{fcs.total} samples",
            collapse_padding=True,
            width=self.column_width - 1,
        )
        tbl.add_column(Markdown("Rank", style="dim"), style="dim", justify="right", no_wrap=True, width=5)
        tbl.add_column(
            Markdown("Time  \n_%_", style=self.percent_color),
            style=self.percent_color,
            justify="right",
            no_wrap=True,
            width=6,
        )
        tbl.add_column(Markdown("Samples"), justify="right", no_wrap=True, width=8)
        tbl.add_column("Function", no_wrap=True)
        tbl.add_column("Location", style="dim", no_wrap=True)

        for rank, percent, frame, count in rows:
            style = self.highlight_color if percent >= self.highlight_percentage else None
            tbl.add_row(
                f"[{rank}]",
                f"{percent}%",
                str(count),
                frame.function_name,
                f"{frame.filename}:{frame.line_number}",
                style=style,
            )
        console.print(tbl)
        return True
