import typer
from rich.console import Console
from rich.table import Table
from typing import Optional
from datetime import datetime, timezone

from leitner_review.config import settings
from leitner_review.database import SessionLocal, init_db
from leitner_review.crud import create_question_items, create_flashcard_items, record_answer
from leitner_review.exceptions import ReviewError
from leitner_review.leitner import LeitnerBoxes
from leitner_review.repositories import SqlAlchemyItemInventory, SqlAlchemyProgressStore
from leitner_review.review_service import ReviewService

app = typer.Typer(help="Leitner Review CLI - spaced repetition for quiz questions and flashcards")
console = Console()


def _service(db) -> ReviewService:
    return ReviewService(SqlAlchemyProgressStore(db), SqlAlchemyItemInventory(db))


def _parse_ids(raw: Optional[str]) -> list:
    if not raw:
        return []
    return [int(part.strip()) for part in raw.split(",") if part.strip()]


@app.command()
def init():
    """Initialize database tables"""
    init_db()
    console.print("[green]✓[/green] Database initialized successfully!")


@app.command()
def reset_db():
    """Delete all data and reinitialize database (WARNING: irreversible!)"""
    confirm = typer.confirm("⚠️  This will DELETE ALL DATA. Are you sure?")
    if not confirm:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    import leitner_review.models  # noqa: F401
    from leitner_review.database import engine, Base
    console.print("[yellow]Dropping all tables...[/yellow]")
    Base.metadata.drop_all(bind=engine)
    console.print("[yellow]Recreating tables...[/yellow]")
    Base.metadata.create_all(bind=engine)
    console.print("[green]✓[/green] Database reset complete! All data deleted.")


@app.command()
def add_items(
    user_id: str = typer.Option(..., prompt="User ID"),
    container_id: int = typer.Option(..., prompt="Container (video) ID"),
    questions: Optional[str] = typer.Option(None, help="Question IDs (comma-separated)"),
    flashcards: Optional[str] = typer.Option(None, help="Flashcard IDs (comma-separated)")
):
    """Register generated questions and flashcards as reviewable items"""
    db = SessionLocal()
    try:
        question_items = create_question_items(db, user_id, container_id, _parse_ids(questions))
        flashcard_items = create_flashcard_items(db, user_id, container_id, _parse_ids(flashcards))
        console.print(f"[green]✓[/green] Added {len(question_items)} questions and {len(flashcard_items)} flashcards")
        for item in question_items + flashcard_items:
            console.print(f"  Item {item.id}: {item.item_type} {item.source_id}")
    except Exception as e:
        console.print(f"[red]✗[/red] Error: {str(e)}")
        raise typer.Exit(code=1)
    finally:
        db.close()


@app.command()
def answer(
    user_id: str = typer.Option(..., prompt="User ID"),
    item_id: Optional[int] = typer.Option(None, help="Reviewable item ID"),
    question: Optional[int] = typer.Option(None, help="Question ID (instead of --item-id)"),
    flashcard: Optional[int] = typer.Option(None, help="Flashcard ID (instead of --item-id)"),
    correct: bool = typer.Option(..., "--correct/--incorrect", help="Whether the answer was correct"),
    mode: str = typer.Option("review", help="learn (first pass) or review (review session)"),
    on: Optional[datetime] = typer.Option(None, formats=["%Y-%m-%d"], help="Answer date (YYYY-MM-DD), default: now")
):
    """Record an answer and update the item's box"""
    if mode not in ["learn", "review"]:
        console.print(f"[red]✗[/red] Invalid mode. Use 'learn' or 'review'")
        raise typer.Exit(code=1)

    db = SessionLocal()
    try:
        service = _service(db)
        if item_id is None:
            if question is not None:
                item_id = service.resolve_item(user_id, "question", question).id
            elif flashcard is not None:
                item_id = service.resolve_item(user_id, "flashcard", flashcard).id
            else:
                console.print(f"[red]✗[/red] Give --item-id, --question or --flashcard")
                raise typer.Exit(code=1)
        else:
            item_id = service.get_item(user_id, item_id).id

        now = on.replace(tzinfo=timezone.utc) if on else None
        record_answer(db, user_id, item_id, correct, answered_at=now)

        if mode == "learn":
            result = service.initialize_progress(user_id, item_id, correct, now=now)
            progress = result.progress
            if not result.created:
                console.print(f"[yellow]Item {item_id} already tracked, schedule unchanged[/yellow]")
        else:
            progress = service.process_answer(user_id, item_id, correct, now=now)

        console.print(f"[green]✓[/green] Answer recorded!")
        console.print(f"  Box: {progress.box_level}/5")
        console.print(f"  Next review: {progress.next_review_date}")
        console.print(f"  Correct/incorrect: {progress.times_correct}/{progress.times_incorrect}")
    except ReviewError as e:
        console.print(f"[red]✗[/red] Error: {str(e)}")
        raise typer.Exit(code=1)
    finally:
        db.close()


@app.command()
def backfill(
    user_id: str = typer.Option(..., prompt="User ID"),
    container_id: int = typer.Option(..., prompt="Container (video) ID")
):
    """Enroll previously answered items of a container into review"""
    db = SessionLocal()
    try:
        created = _service(db).backfill_progress_for_container(user_id, container_id)
        if created:
            console.print(f"[green]✓[/green] Enrolled {len(created)} items in box 1")
        else:
            console.print("[yellow]Nothing to backfill[/yellow]")
    except ReviewError as e:
        console.print(f"[red]✗[/red] Error: {str(e)}")
        raise typer.Exit(code=1)
    finally:
        db.close()


@app.command()
def stats(
    user_id: str,
    container_id: Optional[int] = typer.Option(None, help="Limit to one container")
):
    """View due/new counts and the box distribution"""
    db = SessionLocal()
    try:
        review_stats = _service(db).get_review_stats(user_id, container_id=container_id)

        console.print(f"\n[bold]Review Statistics - {user_id}[/bold]\n")
        console.print(f"  Total items: {review_stats.total_count}")
        console.print(f"    Questions: {review_stats.by_type.questions}")
        console.print(f"    Flashcards: {review_stats.by_type.flashcards}")
        console.print(f"  Due for review: {review_stats.due_count}")
        console.print(f"  New (never answered): {review_stats.new_count}")

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Box", style="cyan", justify="right")
        table.add_column("Interval", style="green", justify="right")
        table.add_column("Items", style="yellow", justify="right")
        for box_level, count in enumerate(review_stats.box_distribution, 1):
            table.add_row(str(box_level), f"{LeitnerBoxes.interval_for(box_level)} days", str(count))
        console.print(table)
    except ReviewError as e:
        console.print(f"[red]✗[/red] Error: {str(e)}")
        raise typer.Exit(code=1)
    finally:
        db.close()


@app.command()
def due(
    user_id: str,
    mode: str = typer.Option("due", help="due, new or random"),
    item_type: str = typer.Option("all", help="all, question or flashcard"),
    container_id: Optional[int] = typer.Option(None, help="Limit to one container"),
    limit: int = typer.Option(settings.review_session_limit, help="Maximum items to list")
):
    """List items for the next study session"""
    db = SessionLocal()
    try:
        items = _service(db).get_items_for_review(
            user_id, mode=mode, item_type=item_type, container_id=container_id, limit=limit
        )
        if not items:
            console.print(f"[yellow]No {mode} items for user {user_id}[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Item", style="cyan", justify="right")
        table.add_column("Type", style="green")
        table.add_column("Source", style="green", justify="right")
        table.add_column("Container", justify="right")
        table.add_column("Box", style="yellow", justify="right")
        table.add_column("Due Date", style="red")

        for entry in items:
            progress = entry.progress
            table.add_row(
                str(entry.item.id),
                entry.item.item_type,
                str(entry.item.source_id),
                str(entry.item.container_id),
                str(progress.box_level) if progress else "-",
                str(progress.next_review_date) if progress else "new"
            )
        console.print(table)
    except ReviewError as e:
        console.print(f"[red]✗[/red] Error: {str(e)}")
        raise typer.Exit(code=1)
    finally:
        db.close()


@app.command()
def progress(user_id: str, container_id: int):
    """View mastery of every item in a container"""
    db = SessionLocal()
    try:
        container_progress = _service(db).get_container_progress(user_id, container_id)
        summary = container_progress.summary

        console.print(f"\n[bold]Container {container_id} - {user_id}[/bold]")
        console.print(f"  Mastered: {summary.mastered}")
        console.print(f"  Learning: {summary.learning}")
        console.print(f"  Not started: {summary.not_started}")
        console.print(f"  Total: {summary.total}")

        if container_progress.terms:
            table = Table(show_header=True, header_style="bold magenta")
            table.add_column("Type", style="cyan")
            table.add_column("ID", style="green", justify="right")
            table.add_column("Status", style="yellow")
            for term in container_progress.terms:
                table.add_row(term.item_type, str(term.item_id), term.mastery_status.replace("_", " "))
            console.print(table)
    except ReviewError as e:
        console.print(f"[red]✗[/red] Error: {str(e)}")
        raise typer.Exit(code=1)
    finally:
        db.close()


if __name__ == "__main__":
    app()
