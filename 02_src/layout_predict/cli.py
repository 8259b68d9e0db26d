"""CLI interface for layout analysis.

Runs the full workflow headless: load the document, submit it for layout
analysis, poll to completion and store the downloadable artifacts.
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from .core.alerts import AlertReporter
from .core.job_client import AnalysisJobClient
from .core.rendering import RecordingRenderer
from .core.storage import ArtifactStorage, DiskStorage
from .core.workflow import WorkflowController, WorkflowState
from .operations.download_result import DownloadResultOperation
from .operations.download_script import DownloadScriptOperation
from .preprocessing.page_provider import DocumentPageProvider
from .schemas.config import API_KEY_ENV, ENDPOINT_ENV, PrebuiltSettings, RenderConfig, ServiceConfig
from .schemas.document import DocumentSource

LOG_FORMAT = "%(asctime)s | %(name)s | %(message)s"
LOG_DATEFMT = "%H:%M:%S"

DEFAULT_OUTPUT_DIR = Path("runs")


def setup_logging(log_level: str, log_file: Optional[Path] = None) -> None:
    """Setup logging: console + optional file handler.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Path to log file (UTF-8). If None, console only.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=sys.stdout,
        force=True,
    )

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        logging.getLogger().addHandler(fh)


def validate_arguments(
    file_path: Optional[Path],
    url: Optional[str],
    settings: PrebuiltSettings,
) -> None:
    """Validate CLI arguments.

    Raises:
        SystemExit: If validation fails
    """
    if file_path is None and not url:
        print("Error: provide a file path or --url", file=sys.stderr)
        sys.exit(1)

    if file_path is not None and not file_path.is_file():
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        sys.exit(1)

    if not settings.is_complete:
        print(
            f"Error: {ENDPOINT_ENV} and {API_KEY_ENV} must be set "
            "(in .env file or as environment variables).",
            file=sys.stderr,
        )
        sys.exit(1)


def create_run_dir(parent_dir: Path) -> Path:
    """Create timestamped run subdirectory, e.g. parent_dir/run_2026-02-09_171500/."""
    ts = datetime.now().strftime("%Y-%m-%d_%H%M%S")
    run_dir = parent_dir / f"run_{ts}"
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def print_alert(reporter: AlertReporter) -> None:
    """Print the pending alert to stderr and dismiss it."""
    if reporter.should_show:
        alert = reporter.current
        print(f"{alert.title}: {alert.message}", file=sys.stderr)
        reporter.dismiss()


def build_summary(workflow: WorkflowController) -> Dict[str, Any]:
    """Human-readable run summary for the YAML report."""
    result = workflow.layout_result
    summary: Dict[str, Any] = {
        "document": workflow.document.label if workflow.document else None,
        "pages": workflow.pagination.num_pages,
        "state": workflow.state.value,
    }
    if workflow.job is not None:
        summary["job"] = {
            "status": workflow.job.status.value,
            "submitted_at": workflow.job.submitted_at.isoformat(),
            "operation_location": (
                workflow.job.handle.operation_location if workflow.job.handle else None
            ),
        }
    if result is not None:
        summary["layout"] = [
            {
                "page": page.page,
                "text_lines": len(page.text_regions),
                "checkboxes": len(page.checkboxes),
                "tables": [
                    {"id": t.id, "rows": t.rows, "columns": t.columns} for t in page.tables
                ],
            }
            for page in (result.pages[n] for n in sorted(result.pages))
        ]
    return summary


async def run_workflow(
    workflow: WorkflowController,
    source: DocumentSource,
    settings: PrebuiltSettings,
    storage: Optional[ArtifactStorage] = None,
    save_pages: bool = False,
) -> bool:
    """Load, analyze and (optionally) walk every page to store its image."""
    if not await workflow.select_document(source):
        return False

    if not await workflow.run_analysis(settings):
        return False

    if save_pages and storage is not None:
        for page_num in range(1, workflow.pagination.num_pages + 1):
            page = await workflow.provider.load_page(page_num)
            storage.save(f"pages/{page_num:03d}", page.image)
    return True


def main() -> int:
    """Main CLI entry point.

    Returns:
        0 on success, 1 on error
    """
    parser = argparse.ArgumentParser(
        description="Run layout analysis on a document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  layout-predict invoice.pdf
  layout-predict --url https://example.com/invoice.pdf
  layout-predict scan.tiff --output-dir ./my_runs --download-script

Each run creates a timestamped subdirectory inside --output-dir:
  output-dir/run_2026-02-09_171500/
    results/Layout-<file>.json   analysis result
    scripts/layout-analyze.py    filled analyze script (--download-script)
    pages/                       rendered page images (--save-pages)
    summary/run.yaml             run summary
    logs/run.log                 full log
        """,
    )

    parser.add_argument("file_path", type=Path, nargs="?", help="Path to document (PDF/JPEG/PNG/TIFF/BMP)")
    parser.add_argument("--url", type=str, default=None, help="Remote document URL instead of a local file")
    parser.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Parent directory for run folders (default: {DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument("--dpi", type=int, default=150, help="DPI for page rendering (default: 150)")
    parser.add_argument("--api-version", type=str, default="v2.1", help="Service API version (default: v2.1)")
    parser.add_argument("--poll-interval-ms", type=int, default=500, help="Poll interval (default: 500)")
    parser.add_argument("--poll-timeout-ms", type=int, default=120000, help="Poll time cap (default: 120000)")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument("--download-script", action="store_true", help="Also store layout-analyze.py")
    parser.add_argument("--save-pages", action="store_true", help="Also store rendered page images")

    args = parser.parse_args()

    try:
        settings = PrebuiltSettings.from_env()
        validate_arguments(args.file_path, args.url, settings)

        run_dir = create_run_dir(args.output_dir)
        log_file = run_dir / "logs" / "run.log"
        setup_logging(args.log_level, log_file)
        logger = logging.getLogger(__name__)
        logger.info(f"Run directory: {run_dir}")

        source = (
            DocumentSource.from_path(args.file_path)
            if args.file_path is not None
            else DocumentSource.from_url(args.url)
        )

        service_config = ServiceConfig(
            api_version=args.api_version,
            poll_interval_ms=args.poll_interval_ms,
            poll_timeout_ms=args.poll_timeout_ms,
        )
        reporter = AlertReporter()
        workflow = WorkflowController(
            provider=DocumentPageProvider(RenderConfig(dpi=args.dpi)),
            job_client=AnalysisJobClient(service_config),
            renderer=RecordingRenderer(),
            reporter=reporter,
        )
        storage = DiskStorage(run_dir)

        ok = asyncio.run(run_workflow(workflow, source, settings, storage, args.save_pages))
        storage.save("summary/run", build_summary(workflow))

        if not ok:
            print_alert(reporter)
            return 1

        try:
            result_path = DownloadResultOperation(workflow, storage).execute()
            script_path = None
            if args.download_script:
                script_path = DownloadScriptOperation(workflow, storage).execute(
                    settings, service_config.api_version
                )
        except (OSError, TypeError, ValueError):
            print_alert(reporter)
            return 1

        print()
        print("=" * 60)
        print("Layout analysis completed successfully!")
        print("=" * 60)
        print(f"Run directory:   {run_dir}")
        print(f"Pages:           {workflow.pagination.num_pages}")
        print(f"Tables found:    {len(workflow.layout_result.tables)}")
        print(f"Result:          {result_path}")
        if script_path:
            print(f"Script:          {script_path}")
        print(f"Log:             {log_file}")
        print("=" * 60)

        return 0

    except KeyboardInterrupt:
        print("\nProcessing interrupted by user", file=sys.stderr)
        return 1

    except Exception as e:
        logging.getLogger(__name__).exception(f"Error during processing: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
