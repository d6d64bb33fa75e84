import argparse
import asyncio
import logging
import os
import sys
import webbrowser
from pathlib import Path
from typing import List, Optional

import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table
from rich.text import Text

from folio.export.compiler import render_guide, write_preview
from folio.export.guide import GuideNotice
from folio.export.packager import ArchivePackager, DownloadStatus, PackagingOutcome
from folio.logic.auth import AdminAuth
from folio.logic.editor import apply_edits, remove_entry, set_path
from folio.logic.intake import draft_record, extract_text
from folio.logic.loader import load_messages, load_record, load_settings, read_data_file
from folio.logic.store import RecordStore
from folio.logic.validator import ValidationResult
from folio.logic.views import View, ViewController, ViewEvent
from folio.models.errors import FieldError, FolioError, IntakeError
from folio.models.settings import Settings
from folio.utils.paths import ensure_dirs

console = Console()
logger = logging.getLogger("folio")

SECTIONS = ["education", "workExperience", "skills", "projects", "achievements", "certifications"]

# -----------------------------------------------------------------------------
# SESSION
# -----------------------------------------------------------------------------

class Session:
    """
    Everything one console session owns: the record store and the admin flag
    (the two state containers), the view controller reading both, and the
    packager. Passed explicitly to every surface.
    """

    def __init__(self, settings: Settings, export_path: Optional[str] = None):
        self.settings = settings
        self.export_path = export_path
        self.last_saved: Optional[str] = None
        self.store = RecordStore()
        self.auth = AdminAuth(settings.admin_password_hash)
        self.views = ViewController(self.auth, self.store)
        self.loop = asyncio.new_event_loop()
        self.packager = ArchivePackager(
            deliver=self.save_archive,
            cooldown=settings.cooldown_seconds,
            scheduler=self.loop.call_later,
        )

    def save_archive(self, name: str, archive: bytes) -> None:
        target = self.export_path or os.path.join(self.settings.export_dir, name)
        ensure_dirs(os.path.dirname(os.path.abspath(target)))
        with open(target, "wb") as f:
            f.write(archive)
        self.last_saved = target

    def accept(self, result: ValidationResult) -> bool:
        """Commits a validated intake result and moves on to the preview."""
        if not result.ok:
            print_errors(result.errors, "Record rejected")
            return False
        self.store.set(result.record)
        self.views.dispatch(ViewEvent.RECORD_PRODUCED)
        console.print(f"[green]✅ Loaded portfolio for {result.record.personal_details.name}[/green]")
        return True

    def export(self) -> PackagingOutcome:
        outcome = self.loop.run_until_complete(self.packager.request(self.store.get()))
        if outcome.ok:
            console.print(f"[green]✅ Saved {self.last_saved} ({outcome.size:,} bytes)[/green]")
            show_guide(outcome.notice)
        elif outcome.status == "failed":
            console.print(f"[bold red]❌ Export failed: {outcome.error}[/bold red]")
        else:
            console.print(f"[yellow]⚠️  {outcome.error}[/yellow]")
        return outcome

    def pump(self) -> None:
        """Lets due timers (the export cooldown) fire between prompts."""
        self.loop.run_until_complete(asyncio.sleep(0))

    def close(self) -> None:
        self.loop.close()

# -----------------------------------------------------------------------------
# UI HELPER FUNCTIONS
# -----------------------------------------------------------------------------

def print_banner():
    title = Text("🗂️  PORTFOLIO FORGE", justify="center", style="bold cyan")
    subtitle = Text("Record → Preview → Static Site", justify="center", style="dim white")
    console.print(Panel(Text.assemble(title, "\n", subtitle), border_style="cyan", expand=False))


def pause():
    Prompt.ask("Press Enter to continue...", default="")


def print_errors(errors: List[FieldError], title: str = "Validation errors"):
    table = Table(title=f"❌ {title}", title_style="bold red")
    table.add_column("Field", style="cyan")
    table.add_column("Problem", style="white")
    for error in errors:
        table.add_row(error.path or "(record)", error.reason)
    console.print(table)


def show_guide(notice: Optional[GuideNotice]):
    if notice is None:
        return
    console.print(Panel(
        Markdown(render_guide(notice.username)),
        title=f"🚀 {notice.archive_name} is ready",
        border_style="green",
    ))


def print_summary(session: Session):
    record = session.store.get()
    details = record.personal_details
    table = Table(title=f"{details.name} · {details.title or 'no title'}")
    table.add_column("Section", style="cyan")
    table.add_column("Entries", justify="right")
    table.add_row("Education", str(len(record.education)))
    table.add_row("Experience", str(len(record.work_experience)))
    table.add_row("Skills", str(len(record.skills)))
    table.add_row("Projects", str(len(record.projects)))
    table.add_row("Achievements", str(len(record.achievements)))
    table.add_row("Certifications", str(len(record.certifications)))
    table.add_row("Inbox", str(len(session.store.messages)))
    console.print(table)
    console.print(f"[dim]SEO: {record.seo.title}[/dim]")

    status = session.packager.status
    if status == DownloadStatus.ERROR:
        console.print(f"[red]Last export failed: {session.packager.last_error} (retry available shortly)[/red]")
    elif status == DownloadStatus.DOWNLOADING:
        console.print("[yellow]Export in progress…[/yellow]")

# -----------------------------------------------------------------------------
# SURFACES
# -----------------------------------------------------------------------------

def intake_surface(session: Session) -> bool:
    console.print("[1] [green]📂 Load record file[/green]      (.yaml / .json)")
    console.print("[2] [magenta]🧠 Draft from a résumé[/magenta]   (text or HTML file, via Ollama)")
    console.print("[3] [magenta]✍️  Draft from pasted text[/magenta]")
    console.print("[0] Exit")
    choice = Prompt.ask("\nChoose an action", choices=["1", "2", "3", "0"], default="0")

    if choice == "0":
        return False
    if choice == "1":
        path = Prompt.ask("Record file")
        if not session.accept(load_record(path)):
            pause()
        return True

    if choice == "2":
        path = Prompt.ask("Résumé file")
        try:
            source = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            console.print(f"[red]❌ Could not read {path}: {e}[/red]")
            pause()
            return True
        if path.lower().endswith((".html", ".htm")):
            source = extract_text(source)
    else:
        console.print("[dim]Paste your career information, finish with an empty line.[/dim]")
        lines = []
        while True:
            line = console.input()
            if not line:
                break
            lines.append(line)
        source = "\n".join(lines)

    try:
        with console.status("🧠 Generating structured data..."):
            result = draft_record(source, session.settings)
    except IntakeError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        pause()
        return True
    if not session.accept(result):
        pause()
    return True


def preview_surface(session: Session) -> bool:
    session.pump()
    print_summary(session)
    console.print()
    console.print("[1] [blue]🔎 Open preview[/blue]")
    console.print("[2] [green]📦 Download site (.zip)[/green]")
    console.print("[3] [yellow]🔐 Admin[/yellow]")
    console.print("[4] [dim]↩️  Start over[/dim]")
    console.print("[0] Exit")
    choice = Prompt.ask("\nChoose an action", choices=["1", "2", "3", "4", "0"], default="0")

    if choice == "0":
        return False
    if choice == "1":
        try:
            index = write_preview(session.store.get(), session.settings.preview_dir)
        except OSError as e:
            console.print(f"[bold red]❌ Could not write preview: {e}[/bold red]")
            pause()
            return True
        console.print(f"[green]✅ Preview written to {index}[/green]")
        webbrowser.open(Path(index).resolve().as_uri())
    elif choice == "2":
        session.export()
        pause()
    elif choice == "3":
        session.views.dispatch(ViewEvent.ADMIN_REQUESTED)
    elif choice == "4":
        session.views.dispatch(ViewEvent.START_OVER)
    return True


def admin_login_surface(session: Session) -> bool:
    if not session.auth.configured:
        console.print("[yellow]⚠️  No admin password configured (set FOLIO_ADMIN_PASSWORD).[/yellow]")
        session.views.dispatch(ViewEvent.BACK)
        return True

    password = Prompt.ask("Admin password (empty to go back)", password=True, default="")
    if not password:
        session.views.dispatch(ViewEvent.BACK)
    elif session.auth.login(password):
        session.views.dispatch(ViewEvent.AUTH_SUCCESS)
    else:
        console.print("[red]❌ Wrong password.[/red]")
        pause()
    return True


def print_inbox(session: Session):
    messages = session.store.messages
    if not messages:
        console.print("[yellow]Inbox is empty.[/yellow]")
        return
    table = Table(title=f"📬 Inbox ({len(messages)})")
    table.add_column("Date", style="dim")
    table.add_column("From", style="cyan")
    table.add_column("Message", style="white")
    for message in messages:
        table.add_row(message.date, f"{message.name} <{message.email}>", message.message)
    console.print(table)


def admin_dashboard_surface(session: Session) -> bool:
    session.pump()
    if session.store.get() is not None:
        print_summary(session)
    console.print()
    console.print("[1] [blue]✏️  Edit a field[/blue]         (e.g. skills.0.level)")
    console.print("[2] [blue]🗂️  Apply edit batch[/blue]     (YAML file)")
    console.print("[3] [red]🗑️  Remove an entry[/red]")
    console.print("[4] [cyan]📬 Inbox[/cyan]")
    console.print("[5] [cyan]📥 Import messages[/cyan]")
    console.print("[6] [green]📦 Download site (.zip)[/green]")
    console.print("[0] Logout")
    choice = Prompt.ask("\nChoose an action", choices=["1", "2", "3", "4", "5", "6", "0"], default="0")

    if choice == "0":
        session.auth.logout()
        session.views.dispatch(ViewEvent.LOGOUT)
        return True

    if choice in ("1", "2", "3", "6") and session.store.get() is None:
        console.print("[yellow]No record loaded yet.[/yellow]")
        pause()
        return True

    result = None
    if choice == "1":
        path = Prompt.ask("Field path")
        raw = Prompt.ask("New value (YAML)")
        try:
            wire = set_path(session.store.get().to_wire(), path, yaml.safe_load(raw))
        except (ValueError, IndexError, TypeError, yaml.YAMLError) as e:
            console.print(f"[red]❌ Cannot set {path}: {e}[/red]")
            pause()
            return True
        result = apply_edits(session.store, wire)
    elif choice == "2":
        path = Prompt.ask("Edit batch file")
        try:
            edits = read_data_file(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            console.print(f"[red]❌ Could not read {path}: {e}[/red]")
            pause()
            return True
        if not isinstance(edits, dict):
            console.print("[red]❌ An edit batch must be a mapping.[/red]")
            pause()
            return True
        result = apply_edits(session.store, edits)
    elif choice == "3":
        section = Prompt.ask("Section", choices=SECTIONS)
        index = IntPrompt.ask("Entry number (from 0)", default=0)
        result = remove_entry(session.store, section, index)
    elif choice == "4":
        print_inbox(session)
    elif choice == "5":
        path = Prompt.ask("Messages file")
        try:
            imported, errors = load_messages(session.store, path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            console.print(f"[red]❌ Could not read {path}: {e}[/red]")
            pause()
            return True
        console.print(f"[green]✅ Imported {imported} message(s)[/green]")
        if errors:
            print_errors(errors, "Skipped messages")
    elif choice == "6":
        session.export()

    if result is not None:
        if result.ok:
            console.print("[green]✅ Saved.[/green]")
        else:
            print_errors(result.errors, "Edit rejected, nothing changed")
    pause()
    return True


SURFACES = {
    View.INTAKE: intake_surface,
    View.PREVIEW: preview_surface,
    View.ADMIN_LOGIN: admin_login_surface,
    View.ADMIN_DASHBOARD: admin_dashboard_surface,
}

# -----------------------------------------------------------------------------
# MAIN ENTRY POINT
# -----------------------------------------------------------------------------

def configure_logging(level: str):
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def run_batch(session: Session, args) -> int:
    """Non-interactive mode: load, then preview and/or export, then exit."""
    result = load_record(args.record)
    if not session.accept(result):
        return 1
    if args.messages:
        imported, errors = load_messages(session.store, args.messages)
        console.print(f"[green]✅ Imported {imported} message(s)[/green]")
        if errors:
            print_errors(errors, "Skipped messages")
    try:
        if args.preview:
            index = write_preview(session.store.get(), args.preview)
            console.print(f"[green]✅ Preview written to {index}[/green]")
    except (FolioError, OSError) as e:
        console.print(f"[bold red]❌ Preview failed: {e}[/bold red]")
        return 1
    if args.export:
        return 0 if session.export().ok else 1
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Portfolio record → static site exporter")
    parser.add_argument("--config", help="Settings file (default: config/folio.yaml)")
    parser.add_argument("--record", help="Record file (.yaml/.json) to load")
    parser.add_argument("--export", help="Write the site archive to this .zip path and exit")
    parser.add_argument("--preview", help="Write the preview site to this directory and exit")
    parser.add_argument("--messages", help="Import visitor messages from this file")
    args = parser.parse_args(argv)

    settings = load_settings(args.config)
    configure_logging(settings.log_level)
    session = Session(settings, export_path=args.export)

    try:
        # --- CLI ARGUMENT MODE (Non-Interactive) ---
        if args.record and (args.export or args.preview):
            return run_batch(session, args)

        if args.record:
            session.accept(load_record(args.record))
        if args.messages:
            load_messages(session.store, args.messages)

        # --- INTERACTIVE MENU MODE ---
        while True:
            console.clear()
            print_banner()
            surface = session.views.surface
            console.rule(f"[bold yellow]{surface.value.replace('_', ' ').title()}[/bold yellow]")
            try:
                if not SURFACES[surface](session):
                    console.print("[cyan]Bye! 👋[/cyan]")
                    return 0
            except FolioError as e:
                logger.exception("Operation failed")
                console.print(f"[bold red]❌ {e}[/bold red]")
                pause()
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️  Interrupted.[/yellow]")
        return 130
    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(main())
