"""Command-line entry point: run the web app or process a purchase order end to end."""

import json
import shlex
from pathlib import Path

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from po_upload.auth.exceptions import AuthenticationError, IdentityError
from po_upload.auth.identity import SupabaseIdentityProvider
from po_upload.auth.models import Session
from po_upload.config.settings import Settings
from po_upload.database.connection import close_pool, init_pool
from po_upload.database.repositories.purchase_order_repository import PurchaseOrderRepository
from po_upload.logging.logger import Log
from po_upload.orchestrator.models import SelectedFile, Stage, UploadJob
from po_upload.orchestrator.orchestrator import ExtractionOrchestrator
from po_upload.orchestrator.proxy_client import ProxyClient
from po_upload.review.form import InvalidDateError, ReviewForm
from po_upload.storage.client import SupabaseStorageClient
from po_upload.storage.document_store import DocumentStore

app = typer.Typer(
    name="po-upload",
    help="Upload purchase orders, extract them with OCR and AI, review and confirm.",
    add_completion=False,
)
console = Console()

REVIEW_HELP = """Commands:
  set FIELD VALUE          customer_name | po_number | po_date (yyyy-mm-dd)
  item INDEX FIELD VALUE   item_number | description | quantity | unit_price | total_price
  add                      append an empty line item
  remove INDEX             delete a line item
  confirm                  save the edited record
  cancel                   discard edits and return to the OCR text"""


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (defaults to HOST)"),
    port: int | None = typer.Option(None, "--port", help="Bind port (defaults to PORT)"),
) -> None:
    """Run the credential proxy and the guarded pages."""
    from po_upload.web.app import create_app

    settings = Settings()
    Log.configure(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@app.command()
def process(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    email: str = typer.Option(..., "--email", "-e", envvar="PO_UPLOAD_EMAIL"),
    password: str = typer.Option(
        ..., "--password", "-p", envvar="PO_UPLOAD_PASSWORD", prompt=True, hide_input=True
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Confirm the extracted record as-is"),
    show_ocr: bool = typer.Option(False, "--show-ocr", help="Print the OCR text"),
) -> None:
    """Upload FILE, run OCR and AI extraction, then review and confirm the result."""
    settings = Settings()
    Log.configure(settings.log_level)

    identity = SupabaseIdentityProvider(
        supabase_url=settings.supabase_url, anon_key=settings.supabase_anon_key
    )
    try:
        session = identity.sign_in(email, password)
    except (AuthenticationError, IdentityError) as exc:
        console.print(f"[red]Sign-in failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    finally:
        identity.close()

    proxy_client = ProxyClient.from_base_url(settings.proxy_base_url)
    storage_client = SupabaseStorageClient(
        supabase_url=settings.supabase_url,
        api_key=settings.supabase_anon_key,
        bucket=settings.storage_bucket,
        access_token=session.access_token,
    )
    if settings.po_persistence_enabled:
        init_pool(settings)

    try:
        orchestrator = build_orchestrator(settings, session, proxy_client, storage_client)
        job = _run(orchestrator, SelectedFile.from_path(file), show_ocr=show_ocr)
        if job.stage is Stage.REVIEWABLE:
            job = _review(orchestrator, auto_confirm=yes)
    finally:
        proxy_client.close()
        storage_client.close()
        if settings.po_persistence_enabled:
            close_pool()

    # A cancelled review leaves no error; anything else short of Confirmed failed.
    if job.stage is Stage.ERRORED or job.error:
        raise typer.Exit(code=1)
    if job.stage is Stage.CONFIRMED and job.record is not None:
        console.print(f"[green]{job.status_message}[/green]")
        console.print_json(json.dumps(job.record.to_dict()))


def build_orchestrator(
    settings: Settings,
    session: Session,
    proxy_client: ProxyClient,
    storage_client: SupabaseStorageClient,
) -> ExtractionOrchestrator:
    Log.debug(f"Building orchestrator for {session.email or session.user_id}")
    return ExtractionOrchestrator(
        proxy_client=proxy_client,
        document_store=DocumentStore(
            storage_client, cache_control=settings.storage_cache_control
        ),
        record_store=PurchaseOrderRepository() if settings.po_persistence_enabled else None,
        signed_url_expiry_hours=settings.signed_url_expiry_hours,
        on_change=_print_stage,
    )


def _run(orchestrator: ExtractionOrchestrator, file: SelectedFile, *, show_ocr: bool) -> UploadJob:
    orchestrator.select_file(file)
    job = orchestrator.submit()
    if job.stage is Stage.ERRORED:
        console.print(f"[red]Error:[/red] {job.error}")
        return job

    console.print(job.status_message)
    if show_ocr:
        console.rule("OCR text")
        console.print(job.ocr_text, markup=False)
        console.rule()

    job = orchestrator.request_extraction()
    if job.stage is not Stage.REVIEWABLE:
        console.print(f"[red]Error:[/red] {job.error}")
    return job


def _review(orchestrator: ExtractionOrchestrator, *, auto_confirm: bool) -> UploadJob:
    if auto_confirm:
        try:
            return orchestrator.confirm_review()
        except InvalidDateError as exc:
            console.print(f"[red]Cannot confirm as extracted:[/red] {exc}")
            raise typer.Exit(code=1) from exc

    console.print(REVIEW_HELP)
    while True:
        form = orchestrator.form
        if form is None:
            if not typer.confirm("Reopen the review form?", default=False):
                return orchestrator.job
            orchestrator.reopen_review()
            continue

        render_form(form)
        try:
            words = shlex.split(typer.prompt("review"))
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")
            continue
        if not words:
            continue

        command, args = words[0], words[1:]
        try:
            if command == "confirm":
                return orchestrator.confirm_review()
            if command == "cancel":
                orchestrator.cancel_review()
            elif command == "set" and len(args) >= 2:
                form.set_field(args[0], " ".join(args[1:]))
            elif command == "item" and len(args) >= 3:
                form.update_line_item(int(args[0]), args[1], " ".join(args[2:]))
            elif command == "add":
                console.print(f"Added line item {form.add_line_item()}")
            elif command == "remove" and len(args) == 1:
                form.remove_line_item(int(args[0]))
            else:
                console.print(REVIEW_HELP)
        except InvalidDateError as exc:
            console.print(f"[red]{exc}[/red]")
        except (KeyError, IndexError, ValueError) as exc:
            console.print(f"[red]Invalid edit:[/red] {exc}")


def render_form(form: ReviewForm) -> None:
    console.print(f"Customer: {form.customer_name or ''}")
    console.print(f"PO number: {form.po_number or ''}")
    console.print(f"PO date: {form.po_date or ''}")

    table = Table(title="Line items")
    table.add_column("#", justify="right")
    table.add_column("Item")
    table.add_column("Description")
    table.add_column("Qty", justify="right")
    table.add_column("Unit price", justify="right")
    table.add_column("Total", justify="right")
    for index, item in enumerate(form.line_items):
        table.add_row(
            str(index),
            item.item_number or "",
            item.description or "",
            _fmt(item.quantity),
            _fmt(item.unit_price),
            _fmt(item.total_price),
        )
    console.print(table)


def _fmt(value: float | None) -> str:
    return "" if value is None else f"{value:g}"


def _print_stage(job: UploadJob) -> None:
    console.print(f"[dim]{job.display_name}: {job.stage.value}[/dim]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
