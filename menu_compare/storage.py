"""Async file output: cookie persistence, HTML and JSON reports"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

import aiofiles
import orjson
from loguru import logger

from .models import PairResult, RunSummary, Side


async def save_cookie_file(cookie_file: Path, cookies: Dict[Side, str]) -> Path:
    """Overwrite the cookie file: line 1 side A, line 2 side B"""
    content = f"{cookies.get(Side.A, '')}\n{cookies.get(Side.B, '')}\n"
    cookie_file.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(cookie_file, "w", encoding="utf-8") as f:
        await f.write(content)
    logger.info(f"💾 Saved session cookies to: {cookie_file}")
    return cookie_file


class ReportStorage:
    """
    Writes run reports without blocking the event loop.
    Uses aiofiles for async I/O and orjson for serialization.
    """

    def __init__(self, reports_dir: Path):
        self.reports_dir = reports_dir

    async def save_html_report(self, content: str, filename: str) -> Path:
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        report_path = self.reports_dir / filename
        async with aiofiles.open(report_path, "w", encoding="utf-8") as f:
            await f.write(content)
        logger.info(f"📄 HTML report saved: {report_path}")
        return report_path

    async def save_json_results(
        self,
        output_file: Path,
        results: List[PairResult],
        summary: RunSummary,
    ) -> Path:
        """Dump summary and per-pair results; dataclasses serialize natively"""
        document = {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "summary": summary,
            "results": results,
        }
        json_bytes = orjson.dumps(document, option=orjson.OPT_INDENT_2)

        output_file.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(output_file, "wb") as f:
            await f.write(json_bytes)

        logger.info(f"💾 JSON results saved: {output_file} ({len(json_bytes)/1024:.1f}KB)")
        return output_file
