#!/usr/bin/env python3
"""
End-to-end test of layout-predict against a real service.

This script:
1. Creates a test PDF with a ruled table
2. Loads it through the WorkflowController
3. Runs layout analysis (submit + poll)
4. Walks the pages, hovers and opens the first table
5. Stores the result JSON

Requirements:
- .env file with FORM_RECOGNIZER_ENDPOINT and FORM_RECOGNIZER_API_KEY
- Installed dependencies (pip install -e .)
"""

import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "02_src"))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def check_env(settings):
    """Check that endpoint and key are configured."""
    from layout_predict.schemas.config import API_KEY_ENV, ENDPOINT_ENV

    if not settings.is_complete:
        print(f"[ERROR] {ENDPOINT_ENV} / {API_KEY_ENV} not found in .env")
        print("Create .env file with:")
        print(f"{ENDPOINT_ENV}=https://<resource>.cognitiveservices.azure.com/")
        print(f"{API_KEY_ENV}=your_actual_key_here")
        return False

    print(f"[OK] Endpoint: {settings.service_uri}")
    return True


def create_test_pdf():
    """Create a two-page test PDF with one table per page."""
    import fitz

    pdf_path = Path(__file__).parent / "03_data" / "test_layout.pdf"
    pdf_path.parent.mkdir(parents=True, exist_ok=True)

    doc = fitz.open()
    for page_num in range(2):
        page = doc.new_page(width=612, height=792)
        page.insert_text((72, 72), f"Section {page_num + 1}", fontsize=18)
        for r in range(3 + page_num):
            for c in range(3):
                rect = fitz.Rect(72 + c * 130, 120 + r * 26, 72 + (c + 1) * 130, 120 + (r + 1) * 26)
                page.draw_rect(rect, color=(0, 0, 0), width=1)
                page.insert_text((rect.x0 + 6, rect.y1 - 8), f"Cell {r}.{c}", fontsize=10)
    doc.save(pdf_path)
    doc.close()

    print(f"[OK] Test PDF created: {pdf_path}")
    return pdf_path


async def run_workflow(workflow, source, settings):
    if not await workflow.select_document(source):
        return False
    print(f"[OK] Document loaded: {workflow.pagination.num_pages} pages")

    print("\n[INFO] Running layout analysis...")
    if not await workflow.run_analysis(settings):
        return False

    for page_num in range(1, workflow.pagination.num_pages + 1):
        await workflow.go_to_page(page_num)
        print(f"   Page {page_num}: {len(workflow.overlay.features)} tables")

    await workflow.go_to_page(1)
    return True


def run_e2e_test():
    """Run the end-to-end test."""
    print("\n" + "="*60)
    print("END-TO-END TEST LAYOUT-PREDICT")
    print("="*60 + "\n")

    try:
        from layout_predict import (
            AlertReporter,
            AnalysisJobClient,
            DiskStorage,
            DocumentPageProvider,
            DocumentSource,
            PrebuiltSettings,
            RecordingRenderer,
            WorkflowController,
        )
        from layout_predict.operations import DownloadResultOperation

        settings = PrebuiltSettings.from_env()
        if not check_env(settings):
            return False

        pdf_path = create_test_pdf()

        reporter = AlertReporter()
        workflow = WorkflowController(
            provider=DocumentPageProvider(),
            job_client=AnalysisJobClient(),
            renderer=RecordingRenderer(),
            reporter=reporter,
        )

        ok = asyncio.run(run_workflow(workflow, DocumentSource.from_path(pdf_path), settings))
        if not ok:
            alert = reporter.current
            print(f"\n[ERROR] {alert.title}: {alert.message}" if alert else "\n[ERROR] Workflow failed")
            return False

        print("\n[OK] Analysis completed")

        overlay = workflow.overlay
        if overlay.features:
            table_id = next(iter(overlay.features))
            overlay.pointer_enter(table_id)
            print(f"\n[TOOLTIP] {table_id}: {overlay.tooltip.text}")
            overlay.click()
            for row in overlay.detail_view.grid:
                print("   | " + " | ".join(row) + " |")
            overlay.close_detail_view()

        storage = DiskStorage(Path(__file__).parent / "03_data" / "e2e_output")
        location = DownloadResultOperation(workflow, storage).execute()

        print("\n" + "="*60)
        print("RESULTS:")
        print("="*60)
        print(f"   Tables: {len(workflow.layout_result.tables)}")
        print(f"   Result: {location}")

        print("\n" + "="*60)
        print("[SUCCESS] TEST PASSED!")
        print("="*60 + "\n")

        return True

    except Exception as e:
        print(f"\n[ERROR] Execution failed: {e}")
        import traceback
        traceback.print_exc()
        return False


if __name__ == "__main__":
    success = run_e2e_test()
    sys.exit(0 if success else 1)
