"""Runs a listing analysis in a browser and stores the report."""

import asyncio
import logging
from pathlib import Path
from typing import Any

import yaml
from playwright.async_api import Page, async_playwright

from listing_analyzer.analyzer import ListingAnalyzer
from listing_analyzer.errors import AnalysisInProgressError, AnalysisTimeoutError
from listing_analyzer.models import AnalysisResult, ExtractionSettings
from listing_analyzer.progress import ProgressCallback, ProgressReporter
from listing_analyzer.report import ReportWriter

logger = logging.getLogger(__name__)


class AnalysisRunner:
    """Owns configuration, run exclusivity, and the wall-clock bound."""

    DEFAULT_MAX_ITEMS = 100
    DEFAULT_TIMEOUT_SECONDS = 120.0

    def __init__(self, config_path: Path, progress_callback: ProgressCallback | None = None):
        """Initialize runner with configuration.

        Args:
            config_path: Path to config.yaml file.
            progress_callback: Observer for progress/complete/error events.
        """
        self.config = self._load_config(config_path)
        self.config_path = config_path

        site_config = self.config.get("site", {})
        self.base_url = site_config.get("base_url", "")
        self.domain = site_config.get("domain", "")

        analysis_config = self.config.get("analysis", {})
        self.category = analysis_config.get("category", "all")
        self.max_items = int(analysis_config.get("max_items", self.DEFAULT_MAX_ITEMS))
        self.timeout_seconds = float(analysis_config.get("timeout_seconds", self.DEFAULT_TIMEOUT_SECONDS))

        self.settings = ExtractionSettings(**self.config.get("thresholds", {}))

        output_config = self.config.get("output", {})
        output_dir = Path(output_config.get("base_dir", "output"))
        reports_dir = output_dir / output_config.get("reports_dir", "reports")
        self.report_writer = ReportWriter(reports_dir, bom=output_config.get("bom", True))

        self.reporter = ProgressReporter(progress_callback)
        self._running = False

    def _load_config(self, config_path: Path) -> dict[str, Any]:
        """Load configuration from YAML file.

        Args:
            config_path: Path to config.yaml.

        Returns:
            Configuration dictionary.

        Raises:
            FileNotFoundError: If config file doesn't exist.
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            config: dict[str, Any] = yaml.safe_load(f) or {}
            return config

    @property
    def is_running(self) -> bool:
        return self._running

    def create_analyzer(self) -> ListingAnalyzer:
        return ListingAnalyzer(
            settings=self.settings,
            base_url=self.base_url,
            domain=self.domain,
            reporter=self.reporter,
        )

    async def run(
        self,
        url: str,
        max_items: int | None = None,
        category: str | None = None,
        headless: bool = True,
    ) -> tuple[AnalysisResult, Path]:
        """Analyze the listings at a URL and write the report.

        Args:
            url: Marketplace results page.
            max_items: Upper bound on items. Defaults to config value.
            category: Category hint. Defaults to config value.
            headless: Whether to run browser in headless mode.

        Returns:
            The analysis result and the path of the written report.

        Raises:
            AnalysisInProgressError: If a run is already in flight.
            AnalysisTimeoutError: If the run exceeds timeout_seconds.
            NoListingsFoundError: If no listings could be located.
        """
        if self._running:
            raise AnalysisInProgressError("An analysis is already running")

        self._running = True
        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(headless=headless)
                page = await browser.new_page()

                try:
                    result = await self.run_on_page(
                        page,
                        url,
                        max_items or self.max_items,
                        category or self.category,
                    )
                finally:
                    await browser.close()
        finally:
            self._running = False

        report_path = self.report_writer.write_csv(result)
        self.report_writer.write_json(result)
        return result, report_path

    async def run_on_page(self, page: Page, url: str, max_items: int, category: str) -> AnalysisResult:
        """Navigate and analyze under the wall-clock bound.

        Args:
            page: Playwright page instance.
            url: Marketplace results page.
            max_items: Upper bound on items.
            category: Category hint.

        Returns:
            AnalysisResult for the page.

        Raises:
            AnalysisTimeoutError: If the bound expires; any partial result is dropped.
        """
        analyzer = self.create_analyzer()

        async def navigate_and_analyze() -> AnalysisResult:
            logger.info(f"Opening {url}")
            await page.goto(url, wait_until="domcontentloaded")
            return await analyzer.analyze(page, max_items, category)

        try:
            return await asyncio.wait_for(navigate_and_analyze(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            message = f"Analysis timed out after {self.timeout_seconds:g} seconds"
            logger.error(message)
            await self.reporter.error(message, {"url": url, "timeout_seconds": self.timeout_seconds})
            raise AnalysisTimeoutError(message) from None
