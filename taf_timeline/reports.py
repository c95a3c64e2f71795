"""Text and JSON reports for parsed TAF timelines."""
import json
from typing import Dict, List

from taf_timeline.categories import worst_category
from taf_timeline.config import Config
from taf_timeline.models.forecast import ParsedTimeline, TimelineBlock


class TimelineReport:
    """Renders a ParsedTimeline for the terminal or as JSON."""

    MAX_COLUMN_WIDTH = 60

    def __init__(self, timeline: ParsedTimeline):
        self.timeline = timeline

    def render(self, output_format: str = None) -> str:
        """Render in the given format (defaults to Config.OUTPUT_FORMAT)."""
        output_format = (output_format or Config.OUTPUT_FORMAT).lower()
        renderers = {
            'table': self.render_table,
            'json': self.render_json,
        }

        if output_format not in renderers:
            raise ValueError(
                f"Unknown output format: {output_format} "
                f"(available: {', '.join(renderers.keys())})"
            )

        return renderers[output_format]()

    def render_json(self) -> str:
        return json.dumps(self.timeline.to_dict(), indent=2, ensure_ascii=False)

    def render_table(self) -> str:
        """Summary header followed by one table row per block."""
        lines = [self.timeline.summary().split("\n\n")[0], ""]

        if not self.timeline.blocks:
            lines.append("No forecast periods.")
            return "\n".join(lines)

        rows = [
            self._block_row(index, block)
            for index, block in enumerate(self.timeline.blocks)
        ]
        lines.extend(self._display_results(rows))

        worst = worst_category(*(block.category for block in self.timeline.blocks))
        lines.append("")
        lines.append(f"{len(rows)} period(s), worst category {worst.value}.")
        return "\n".join(lines)

    def _block_row(self, index: int, block: TimelineBlock) -> Dict[str, str]:
        source = block.source_type.value if block.source_type else '-'
        if block.probability is not None:
            source += f" {block.probability}%"

        return {
            ' ': '▶' if index == self.timeline.current_block_index else '',
            'Start': block.start.strftime('%d/%H%MZ'),
            'End': block.end.strftime('%d/%H%MZ'),
            'Type': source,
            'Cat': block.category.value,
            'Vis SM': self._format_number(block.visibility_sm),
            'Ceiling': str(block.ceiling_ft) if block.ceiling_ft is not None else '-',
            'Wind': self._format_wind(block),
            'Wx': ' '.join(block.phenomena) or '-',
            'Raw': block.raw_text or '',
        }

    @staticmethod
    def _format_number(value) -> str:
        if value is None:
            return '-'
        return f"{value:g}"

    @staticmethod
    def _format_wind(block: TimelineBlock) -> str:
        wind = block.wind
        if wind.speed is None:
            return '-'
        direction = f"{wind.direction:03d}" if isinstance(wind.direction, int) else str(wind.direction or '---')
        text = f"{direction}{wind.speed:02d}"
        if wind.gust is not None:
            text += f"G{wind.gust:02d}"
        return text + "KT"

    def _display_results(self, results: List[Dict[str, str]]) -> List[str]:
        """Format rows as a fixed-width table."""
        columns = list(results[0].keys())

        # Calculate column widths
        widths = {col: len(col) for col in columns}
        for row in results:
            for col in columns:
                val_len = len(str(row[col]))
                if val_len > widths[col]:
                    widths[col] = min(val_len, self.MAX_COLUMN_WIDTH)

        header = " | ".join(col.ljust(widths[col]) for col in columns)
        separator = "-+-".join("-" * widths[col] for col in columns)

        lines = [header, separator]
        for row in results:
            lines.append(
                " | ".join(str(row[col])[:widths[col]].ljust(widths[col]) for col in columns).rstrip()
            )
        return lines
