import asyncio
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer

from core.dependencies import DependencyContainer
from recordings.models import ContactGroup, FileRecord, FilterSpec
from recordings.services.error_handling import UploadError
from recordings.services.filter_service import estimate_duration_seconds, filter_groups
from recordings.services.grouping_service import group_files_by_contact
from recordings.services.reconciliation_service import ReconciliationService
from recordings.services.sync_types import TickReport, TickStatus, UploadStatus
from recordings.storage.local_storage import filter_audio_files
from utils.formatting import format_date, format_duration, format_size_kb

app = typer.Typer(
    name="recsync",
    help="CLI tool to mirror call recordings to cloud storage and browse them by contact.",
    add_completion=False
)


class Source(str, Enum):
    local = "local"
    cloud = "cloud"


RecordingsDirOption = typer.Option(
    None, "--path", "-p", help="Recordings directory. Defaults to RECSYNC_RECORDINGS_DIR or the device folder."
)


def _require_service(container: DependencyContainer) -> ReconciliationService:
    service = container.reconciliation_service
    if service is None:
        typer.secho(
            "Cloud storage is not configured. Set RECSYNC_GCS_BUCKET to enable sync.",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)
    return service


def _echo_report(report: TickReport) -> None:
    if report.status == TickStatus.SKIPPED_BUSY:
        typer.secho("Skipped: another sync is in progress.", fg=typer.colors.YELLOW)
        return
    if report.status == TickStatus.FAILED:
        typer.secho(f"Sync failed: {report.message}", fg=typer.colors.RED, err=True)
        return
    if report.local_root_missing:
        typer.secho("Recordings directory not found, nothing to upload.", fg=typer.colors.YELLOW)
    typer.echo(
        f"Local files: {report.local_count} | Cloud files: {report.cloud_count} | "
        f"Uploaded: {len(report.uploaded)} | Failed: {len(report.failures)}"
    )
    for failure in report.failures:
        typer.secho(f"  {failure.name}: {failure.message}", fg=typer.colors.RED)


def _echo_groups(groups: List[ContactGroup], uploaded: Optional[frozenset] = None) -> None:
    typer.echo(f"Recordings ({len(groups)})")
    for group in groups:
        typer.secho(
            f"{group.contact_name}  {group.phone or 'Unknown'} • {len(group.files)} recordings",
            bold=True,
        )
        for record in group.files:
            marker = ""
            if uploaded is not None:
                marker = " [cloud]" if record.name in uploaded else " [local only]"
            typer.echo(
                f"  {record.name}  {format_size_kb(record.size)} • {format_date(record.timestamp)} • "
                f"{format_duration(estimate_duration_seconds(record.size))}{marker}"
            )


def _list_local_files(container: DependencyContainer) -> List[FileRecord]:
    local_store = container.local_store
    if not local_store.exists(container.recordings_dir):
        typer.secho(f"Recordings directory not found: {container.recordings_dir}", fg=typer.colors.YELLOW)
        return []
    return local_store.list_dir(container.recordings_dir)


@app.command()
def sync(recordings_dir: Optional[Path] = RecordingsDirOption):
    """
    Run one reconciliation cycle: upload every local recording missing from the cloud.
    """
    container = DependencyContainer(recordings_dir=recordings_dir)
    service = _require_service(container)
    report = asyncio.run(service.run_tick())
    _echo_report(report)
    if report.status == TickStatus.FAILED:
        raise typer.Exit(code=1)


@app.command()
def refresh(recordings_dir: Optional[Path] = RecordingsDirOption):
    """
    Re-list local and cloud recordings without uploading anything.
    """
    container = DependencyContainer(recordings_dir=recordings_dir)
    service = _require_service(container)
    report = asyncio.run(service.refresh())
    _echo_report(report)
    if report.status == TickStatus.FAILED:
        raise typer.Exit(code=1)


@app.command()
def watch(
    recordings_dir: Optional[Path] = RecordingsDirOption,
    interval: Optional[float] = typer.Option(
        None, "--interval", "-i", help="Seconds between reconciliation cycles (minimum 5)."
    ),
):
    """
    Reconcile periodically until interrupted.
    """
    container = DependencyContainer(recordings_dir=recordings_dir, interval_seconds=interval)
    service = _require_service(container)
    service.add_listener(
        lambda snapshot: typer.echo(
            f"Synced: {len(snapshot.local_files)} local, {len(snapshot.uploaded_names)} in cloud"
        )
    )
    typer.echo(f"Watching {service.recordings_dir} every {service.interval_seconds:g}s. Press Ctrl+C to stop.")
    try:
        asyncio.run(service.run_forever())
    except KeyboardInterrupt:
        typer.echo("Stopped.")


@app.command()
def upload(
    name: str = typer.Argument(..., help="File name of the recording to upload."),
    recordings_dir: Optional[Path] = RecordingsDirOption,
):
    """
    Upload a single local recording to the cloud.
    """
    container = DependencyContainer(recordings_dir=recordings_dir)
    service = _require_service(container)

    async def _upload():
        report = await service.refresh()
        if report.status != TickStatus.COMPLETED:
            raise UploadError(name, report.message or "could not list recordings")
        record = service.find_local(name)
        if record is None:
            raise UploadError(name, f"not found in {service.recordings_dir}")
        return await service.upload_file(record)

    try:
        outcome = asyncio.run(_upload())
    except UploadError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if outcome.status == UploadStatus.ALREADY_UPLOADED:
        typer.secho(f"{name} is already uploaded.", fg=typer.colors.GREEN)
    else:
        typer.secho(f"File uploaded to cloud: {outcome.url}", fg=typer.colors.GREEN)


@app.command()
def groups(
    source: Source = typer.Option(Source.local, "--source", "-s", help="List local or cloud recordings."),
    contact: Optional[str] = typer.Option(None, "--contact", "-c", help="Exact contact name."),
    month: Optional[int] = typer.Option(None, "--month", min=1, max=12, help="Month (1-12)."),
    day: Optional[int] = typer.Option(None, "--day", min=1, max=31, help="Day of month (1-31)."),
    min_duration: Optional[int] = typer.Option(
        None, "--min-duration", min=0, help="Minimum estimated duration in seconds."
    ),
    recordings_dir: Optional[Path] = RecordingsDirOption,
):
    """
    Show recordings grouped by contact, optionally filtered.
    """
    container = DependencyContainer(recordings_dir=recordings_dir)
    spec = FilterSpec(contact_name=contact, month=month, day=day, min_duration_seconds=min_duration)
    uploaded = None

    files = None
    session = container.session
    if source == Source.cloud or container.cloud_enabled:
        service = _require_service(container)
        report = asyncio.run(service.refresh())
        if report.status != TickStatus.FAILED:
            session = service.session
            files = session.cloud_files if source == Source.cloud else session.local_files
            if source == Source.local:
                uploaded = session.ledger.names()
        elif source == Source.cloud:
            typer.secho(f"Error: {report.message}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        else:
            typer.secho(
                f"Warning: {report.message}. Showing local recordings without upload status.",
                fg=typer.colors.YELLOW,
                err=True,
            )

    if files is None:
        files = _list_local_files(container)

    grouped = group_files_by_contact(files, session.contacts.resolve)
    filtered = filter_groups(grouped, spec)
    _echo_groups(filtered, uploaded)

    if contact and not filtered:
        known = list(dict.fromkeys([group.contact_name for group in grouped] + session.contacts.contact_names()))
        if known:
            typer.echo(f"No recordings for '{contact}'. Known contacts: {', '.join(known)}")


@app.command()
def detect(recordings_dir: Optional[Path] = RecordingsDirOption):
    """
    List audio files found in the recordings directory.
    """
    container = DependencyContainer(recordings_dir=recordings_dir)
    local_store = container.local_store
    if not local_store.exists(container.recordings_dir):
        typer.secho(f"Folder does not exist: {container.recordings_dir}", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)

    try:
        files = local_store.list_dir(container.recordings_dir)
    except OSError as e:
        typer.secho(f"Cannot read folder: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    audio_files = filter_audio_files(files)
    typer.echo(f"Found {len(audio_files)} audio files ({len(files)} files total)")
    for record in audio_files:
        typer.echo(f"  {record.name}")


@app.command()
def delete(name: str = typer.Argument(..., help="Name of the cloud recording to delete.")):
    """
    Delete a recording from cloud storage.
    """
    container = DependencyContainer()
    cloud_store = container.cloud_store
    if cloud_store is None:
        typer.secho("Cloud storage is not configured.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if cloud_store.delete(cloud_store.object_path(name)):
        typer.secho(f"Deleted {name} from cloud storage.", fg=typer.colors.GREEN)
    else:
        typer.secho(f"Could not delete {name}.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
