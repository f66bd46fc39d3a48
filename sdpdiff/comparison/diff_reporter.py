"""Diff Reporter - Generate structured comparison results and markdown summaries."""

from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Tuple

from sdpdiff.monitoring.recorder import Discrepancy

logger = logging.getLogger(__name__)

DEFAULT_RESULTS_DIR = Path("results")
TOP_CATEGORY_LIMIT = 10


def _scope(level: int | None) -> str:
    if level is None:
        return "document"
    if level < 0:
        return "session"
    return f"m-section {level}"


class DiffReporter:
    """Generate structured comparison artifacts (JSON + Markdown)."""

    def __init__(self, output_dir: Path | None = None) -> None:
        self.output_dir = Path(output_dir) if output_dir is not None else DEFAULT_RESULTS_DIR
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def build_stats(
        self,
        sdp_id: str,
        equal: bool,
        discrepancies: List[Discrepancy],
        counts: Dict[str, int] | None = None,
    ) -> Dict[str, Any]:
        categories = Counter(d.category for d in discrepancies)
        return {
            "sdp_id": sdp_id,
            "total_discrepancies": len(discrepancies),
            "categories": dict(sorted(categories.items())),
            "counters": dict(sorted((counts or {}).items())),
            "parity_status": "PASS" if equal else "FAIL",
            "timestamp": datetime.now().isoformat(),
        }

    def generate_json_report(
        self,
        sdp_id: str,
        discrepancies: List[Discrepancy],
        stats: Dict[str, Any],
        original_sdp: str | None = None,
    ) -> str:
        report: Dict[str, Any] = {
            "metadata": {
                "sdp_id": sdp_id,
                "generated_at": datetime.now().isoformat(),
            },
            "statistics": stats,
            "discrepancies": [discrepancy.to_dict() for discrepancy in discrepancies],
        }

        if original_sdp is not None:
            report["original_sdp"] = original_sdp

        return json.dumps(report, indent=2, default=str)

    def generate_markdown_summary(
        self,
        sdp_id: str,
        discrepancies: List[Discrepancy],
        stats: Dict[str, Any],
    ) -> str:
        md_lines = [
            f"# SDP Comparison Report: {sdp_id}",
            f"**Generated:** {datetime.now().isoformat()}",
            "",
            "## Summary",
            f"- **Total Discrepancies:** {stats['total_discrepancies']}",
            f"- **Parity Status:** {stats['parity_status']}",
            "",
        ]

        if discrepancies:
            md_lines.append("## Detailed Discrepancies")
            md_lines.append("")
            for discrepancy in discrepancies:
                md_lines.append(
                    f"- `{discrepancy.category}` ({_scope(discrepancy.level)}): "
                    f"{discrepancy.message}"
                )
        else:
            md_lines.append("Perfect Parity")

        md_lines.extend(
            [
                "",
                "---",
                "*Generated by sdpdiff*",
            ]
        )

        return "\n".join(md_lines)

    def write_reports(
        self,
        sdp_id: str,
        discrepancies: List[Discrepancy],
        stats: Dict[str, Any],
        original_sdp: str | None = None,
    ) -> Tuple[Path, Path]:
        json_report = self.generate_json_report(sdp_id, discrepancies, stats, original_sdp)
        markdown_report = self.generate_markdown_summary(sdp_id, discrepancies, stats)

        safe_sdp_id = sdp_id.replace("/", "_")
        json_path = self.output_dir / f"{safe_sdp_id}.json"
        md_path = self.output_dir / f"{safe_sdp_id}.md"

        json_path.write_text(json_report, encoding="utf-8")
        md_path.write_text(markdown_report, encoding="utf-8")

        logger.info("Wrote comparison reports for %s", sdp_id)
        logger.info("  JSON: %s", json_path)
        logger.info("  Markdown: %s", md_path)

        return json_path, md_path

    def generate_aggregate_summary(self, all_stats: List[Dict[str, Any]]) -> str:
        total_sdps = len(all_stats)
        passed = sum(1 for stat in all_stats if stat["parity_status"] == "PASS")
        failed = total_sdps - passed
        pass_rate = (passed / total_sdps * 100) if total_sdps else 100.0

        category_totals: Counter = Counter()
        for stat in all_stats:
            category_totals.update(stat["categories"])

        md_lines = [
            "# SDP Comparison - Aggregate Summary",
            f"**Generated:** {datetime.now().isoformat()}",
            "",
            "## Overall Results",
            f"- **Total SDPs Compared:** {total_sdps}",
            f"- **Passed:** {passed}",
            f"- **Failed:** {failed}",
            f"- **Pass Rate:** {pass_rate:.1f}%",
            "",
            "## Top Discrepancy Categories",
            "",
        ]

        for category, count in category_totals.most_common(TOP_CATEGORY_LIMIT):
            md_lines.append(f"- `{category}`: {count}")

        md_lines.extend(["", "## Detailed Results", ""])

        for stat in sorted(all_stats, key=lambda item: item["sdp_id"]):
            md_lines.append(
                f"- **{stat['sdp_id']}** {stat['parity_status']} "
                f"(Discrepancies: {stat['total_discrepancies']})"
            )

        md_lines.extend(
            [
                "",
                "---",
                "*Generated by sdpdiff*",
            ]
        )

        return "\n".join(md_lines)

    def write_aggregate_summary(self, all_stats: List[Dict[str, Any]]) -> Path:
        summary = self.generate_aggregate_summary(all_stats)
        summary_path = self.output_dir / "SUMMARY.md"
        summary_path.write_text(summary, encoding="utf-8")
        logger.info("Wrote aggregate summary: %s", summary_path)
        return summary_path
