"""
Command-line interface for Memory Bender.

Record dated memories, browse them by calendar or search, and compare the
same day across years on the timeline.
"""
import click
import logging
import sys
from datetime import date
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text
from rich.markup import escape
from rich import box

from memorybender import __version__
from memorybender.calendar_view import marked_days, memories_on_date, month_grid
from memorybender.config import get_default_user, get_log_level
from memorybender.image_store import ImageStore, ImageTooLargeError
from memorybender.memory_store import MemoryStore, MemoryValidationError
from memorybender.moods import Mood
from memorybender.records import MemoryRecord, parse_memory_date
from memorybender.search import available_years, filter_memories, highlight_spans
from memorybender.timeline import (
    DatedMemory,
    DayKey,
    NavigationStatus,
    TimelineNavigator,
    build_index,
    to_day_key,
)


# Setup logging
logging.basicConfig(
    level=get_log_level(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Rich console for pretty output
console = Console()

MOOD_CHOICE = click.Choice(Mood.labels(), case_sensitive=False)

NAVIGATION_MESSAGES = {
    NavigationStatus.AT_START: "Already at the first day",
    NavigationStatus.AT_END: "Already at the last day",
    NavigationStatus.OUT_OF_RANGE: "No day at that position",
    NavigationStatus.UNKNOWN_DAY: "No memories on that day",
    NavigationStatus.EMPTY: "No memories to browse yet",
}


def _owner(ctx: click.Context) -> str:
    return ctx.obj["owner_id"]


def _preview(text: str, width: int = 60) -> str:
    return text[:width] + "..." if len(text) > width else text


def _date_label(record: MemoryRecord) -> str:
    value = record.memory_date
    return value.isoformat() if isinstance(value, date) else str(value)


def _resolve_memory(store: MemoryStore, owner_id: str, memory_id: str) -> Optional[MemoryRecord]:
    """Find a memory by full id or unique id prefix."""
    memory = store.get_memory(owner_id, memory_id)
    if memory:
        return memory

    candidates = [m for m in store.list_memories(owner_id) if m.id.startswith(memory_id)]
    if len(candidates) == 1:
        return candidates[0]
    if len(candidates) > 1:
        console.print(f"[yellow]⚠[/yellow] '{memory_id}' matches {len(candidates)} memories, use more characters")
    return None


def _discard_image(image_ref: Optional[str]):
    """Remove a photo saved for a write that did not go through."""
    if image_ref:
        ImageStore().delete(image_ref)


def _memory_panel(memory: MemoryRecord, title: str = "📝 Memory Details") -> Panel:
    content = f"""
[cyan]ID:[/cyan] {memory.id}
[cyan]Date:[/cyan] {_date_label(memory)}
[cyan]Mood:[/cyan] {memory.mood.badge}

{escape(memory.text)}
    """.strip()

    if memory.message_to_past:
        content += f"\n\n[cyan]Dear past me:[/cyan] [italic]{escape(memory.message_to_past)}[/italic]"
    if memory.image_ref:
        content += f"\n[cyan]Photo:[/cyan] {escape(memory.image_ref)}"
    if memory.updated_at and memory.updated_at != memory.created_at:
        content += f"\n[dim]Updated: {memory.updated_at[:19]}[/dim]"

    return Panel(content, title=title, border_style=memory.mood.color, box=box.ROUNDED)


def _memory_table(memories: List[MemoryRecord], title: str, query: str = "") -> Table:
    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("ID", style="dim", width=10)
    table.add_column("Date", style="white", width=12)
    table.add_column("Mood", width=14)
    table.add_column("Memory", style="white", width=60)

    for memory in memories:
        preview = Text(_preview(memory.text))
        for start, end in highlight_spans(preview.plain, query):
            preview.stylize("bold black on yellow", start, end)
        table.add_row(memory.id[:8], _date_label(memory), memory.mood.badge, preview)

    return table


def _parse_date_option(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return parse_memory_date(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _parse_day_option(value: Optional[str]) -> Optional[DayKey]:
    if not value:
        return None
    try:
        return DayKey.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


@click.group()
@click.version_option(version=__version__)
@click.option("--user", "-u", default=None, help="Whose journal to use (default: $MEMORYBENDER_USER or 'me')")
@click.pass_context
def cli(ctx: click.Context, user: Optional[str]):
    """
    Memory Bender - Personal Memory Journal

    Capture moments from your past and see the same day across the years.
    """
    ctx.ensure_object(dict)
    ctx.obj["owner_id"] = user or get_default_user()


@cli.command()
@click.argument("text")
@click.option("--mood", "-m", type=MOOD_CHOICE, required=True, help="How the memory felt")
@click.option("--date", "-d", "memory_date", default=None, help="Date of the memory (YYYY-MM-DD, default today)")
@click.option("--message", default=None, help="A message to your past self")
@click.option("--image", type=click.Path(exists=True, dir_okay=False), default=None, help="Photo to attach (max 5MB)")
@click.pass_context
def add(ctx, text: str, mood: str, memory_date: Optional[str], message: Optional[str], image: Optional[str]):
    """Record a new memory."""
    owner_id = _owner(ctx)
    day = _parse_date_option(memory_date)
    image_ref = None

    try:
        day, text, mood = MemoryStore.validate(day, text, mood)
        if image:
            image_ref = ImageStore().save(owner_id, image)
        memory = MemoryStore().create_memory(
            owner_id=owner_id,
            memory_date=day,
            text=text,
            mood=mood,
            message_to_past=message,
            image_ref=image_ref
        )
    except (MemoryValidationError, ImageTooLargeError) as e:
        _discard_image(image_ref)
        console.print(f"[red]✗[/red] {e}", style="red")
        logger.warning(f"Rejected memory: {e}")
        sys.exit(1)
    except Exception as e:
        _discard_image(image_ref)
        console.print(f"[red]✗[/red] Error saving memory: {e}", style="red")
        logger.error(f"Error in add command: {e}", exc_info=True)
        sys.exit(1)

    console.print(f"[green]✓[/green] Memory saved: {memory.id[:8]} ({day.isoformat()}, {memory.mood.badge})")


@cli.command()
@click.argument("memory_id")
@click.pass_context
def view(ctx, memory_id: str):
    """Show a memory by ID (or ID prefix)."""
    try:
        memory = _resolve_memory(MemoryStore(), _owner(ctx), memory_id)
    except Exception as e:
        console.print(f"[red]✗[/red] Error getting memory: {e}", style="red")
        logger.error(f"Error in view command: {e}", exc_info=True)
        sys.exit(1)

    if not memory:
        console.print(f"[red]✗[/red] Memory not found: {memory_id}", style="red")
        sys.exit(1)

    console.print(_memory_panel(memory))


@cli.command()
@click.argument("memory_id")
@click.option("--text", "-t", default=None, help="New memory text")
@click.option("--mood", "-m", type=MOOD_CHOICE, default=None, help="New mood")
@click.option("--date", "-d", "memory_date", default=None, help="New date (YYYY-MM-DD)")
@click.option("--message", default=None, help="New message to your past self ('' clears it)")
@click.option("--image", type=click.Path(exists=True, dir_okay=False), default=None, help="Replace the photo")
@click.pass_context
def edit(ctx, memory_id: str, text, mood, memory_date, message, image):
    """Edit an existing memory."""
    owner_id = _owner(ctx)
    patch = {}
    if text is not None:
        patch["text"] = text
    if mood is not None:
        patch["mood"] = mood
    if memory_date is not None:
        patch["memory_date"] = _parse_date_option(memory_date)
    if message is not None:
        patch["message_to_past"] = message
    image_ref = None

    try:
        store = MemoryStore()
        memory = _resolve_memory(store, owner_id, memory_id)
        if not memory:
            console.print(f"[red]✗[/red] Memory not found: {memory_id}", style="red")
            sys.exit(1)

        if not patch and not image:
            console.print("[yellow]Nothing to change[/yellow]")
            return

        MemoryStore.validate(
            patch.get("memory_date", memory.memory_date),
            patch.get("text", memory.text),
            patch.get("mood", memory.mood)
        )
        if image:
            image_ref = patch["image_ref"] = ImageStore().save(owner_id, image)

        updated = store.update_memory(owner_id, memory.id, **patch)
    except (MemoryValidationError, ImageTooLargeError) as e:
        _discard_image(image_ref)
        console.print(f"[red]✗[/red] {e}", style="red")
        logger.warning(f"Rejected edit of {memory_id}: {e}")
        sys.exit(1)
    except Exception as e:
        _discard_image(image_ref)
        console.print(f"[red]✗[/red] Error editing memory: {e}", style="red")
        logger.error(f"Error in edit command: {e}", exc_info=True)
        sys.exit(1)

    console.print(f"[green]✓[/green] Memory updated: {updated.id[:8]}")
    console.print(_memory_panel(updated))


@cli.command()
@click.argument("memory_id")
@click.confirmation_option(prompt="Are you sure you want to delete this memory?")
@click.pass_context
def delete(ctx, memory_id: str):
    """Delete a memory by ID (or ID prefix)."""
    owner_id = _owner(ctx)
    try:
        store = MemoryStore()
        memory = _resolve_memory(store, owner_id, memory_id)
        success = bool(memory) and store.delete_memory(owner_id, memory.id)
    except Exception as e:
        console.print(f"[red]✗[/red] Error deleting memory: {e}", style="red")
        logger.error(f"Error in delete command: {e}", exc_info=True)
        sys.exit(1)

    if success:
        console.print(f"[green]✓[/green] Memory deleted: {memory.id[:8]}")
    else:
        console.print(f"[red]✗[/red] Memory not found: {memory_id}", style="red")
        sys.exit(1)


@cli.command(name="list")
@click.option("--year", "-y", type=int, default=None, help="Only memories from this year")
@click.pass_context
def list_memories(ctx, year: Optional[int]):
    """List memories, newest first."""
    owner_id = _owner(ctx)
    try:
        store = MemoryStore()
        memories = store.list_year(owner_id, year) if year else store.list_memories(owner_id)
    except Exception as e:
        console.print(f"[red]✗[/red] Error listing memories: {e}", style="red")
        logger.error(f"Error in list command: {e}", exc_info=True)
        sys.exit(1)

    if not memories:
        console.print(f"[yellow]No memories{f' in {year}' if year else ''} yet[/yellow]")
        return

    title = f"Memories in {year}" if year else f"All Memories ({len(memories)})"
    console.print(_memory_table(memories, title))


@cli.command()
@click.argument("query", default="")
@click.option("--year", "-y", type=int, default=None, help="Filter by year")
@click.option("--mood", "-m", type=MOOD_CHOICE, default=None, help="Filter by mood")
@click.pass_context
def search(ctx, query: str, year: Optional[int], mood: Optional[str]):
    """Search memory text, messages and moods."""
    try:
        memories = MemoryStore().list_memories(_owner(ctx))
    except Exception as e:
        console.print(f"[red]✗[/red] Error searching memories: {e}", style="red")
        logger.error(f"Error in search command: {e}", exc_info=True)
        sys.exit(1)

    results = filter_memories(memories, query=query, year=year, mood=mood)

    if not results:
        console.print(f"[yellow]No memories found for: '{query}'[/yellow]")
        years = available_years(memories)
        if years:
            console.print(f"[dim]Years with memories: {', '.join(str(y) for y in years)}[/dim]")
        return

    console.print(_memory_table(results, f"🔍 Search Results ({len(results)})", query=query))


@cli.command()
@click.option("--year", "-y", type=int, default=None, help="Year (default: this year)")
@click.option("--month", "-M", type=click.IntRange(1, 12), default=None, help="Month (default: this month)")
@click.option("--day", type=click.IntRange(1, 31), default=None, help="Also show the memories of this day")
@click.pass_context
def calendar(ctx, year: Optional[int], month: Optional[int], day: Optional[int]):
    """Show a month calendar with days that hold memories."""
    today = date.today()
    year = year or today.year
    month = month or today.month

    try:
        memories = MemoryStore().list_year(_owner(ctx), year)
    except Exception as e:
        console.print(f"[red]✗[/red] Error loading calendar: {e}", style="red")
        logger.error(f"Error in calendar command: {e}", exc_info=True)
        sys.exit(1)

    marked = marked_days(memories, year, month)

    table = Table(
        title=f"📅 {date(year, month, 1).strftime('%B %Y')}",
        box=box.SIMPLE_HEAVY,
        show_header=True,
        header_style="bold cyan"
    )
    for name in ("Mo", "Tu", "We", "Th", "Fr", "Sa", "Su"):
        table.add_column(name, justify="right", width=4)

    for week in month_grid(year, month):
        cells = []
        for number in week:
            if number == 0:
                cells.append("")
            elif number in marked:
                cells.append(f"[bold magenta]{number}•[/bold magenta]")
            else:
                cells.append(str(number))
        table.add_row(*cells)

    console.print(table)
    console.print(f"[dim]{len(marked)} day(s) with memories this month[/dim]")

    if day:
        try:
            selected = date(year, month, day)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--day")
        on_day = memories_on_date(memories, selected)
        if not on_day:
            console.print(f"[yellow]No memories on {selected.isoformat()}[/yellow]")
        for memory in on_day:
            console.print(_memory_panel(memory, title=selected.strftime("%B %d, %Y")))


def _render_day(day_key: DayKey, matches: List[DatedMemory], position: int, total: int):
    console.print(Panel(
        f"[bold]{day_key.display}[/bold]  [dim]({position + 1} of {total})[/dim]",
        border_style="cyan",
        box=box.DOUBLE
    ))
    for match in matches:
        console.print(_memory_panel(match.record, title=str(match.display_year)))


@cli.command()
@click.option("--date", "-d", "day", default=None, help="Start on this day (MM-DD)")
@click.option("--interactive", "-i", is_flag=True, help="Step through days with n/p/j/q")
@click.pass_context
def timeline(ctx, day: Optional[str], interactive: bool):
    """Compare the same day across different years."""
    day_key = _parse_day_option(day)

    try:
        memories = MemoryStore().list_memories(_owner(ctx))
    except Exception as e:
        console.print(f"[red]✗[/red] Error loading timeline: {e}", style="red")
        logger.error(f"Error in timeline command: {e}", exc_info=True)
        sys.exit(1)

    index = build_index(memories)
    if index.skipped:
        console.print(f"[yellow]⚠[/yellow] Skipped {len(index.skipped)} memory(ies) with an unreadable date")

    navigator = TimelineNavigator()
    if not navigator.initialize(index).ok:
        console.print(f"[yellow]{NAVIGATION_MESSAGES[NavigationStatus.EMPTY]}[/yellow]")
        return

    if day_key:
        result = navigator.select(day_key)
        if not result.ok:
            console.print(f"[yellow]{NAVIGATION_MESSAGES[result.status]}: {day_key.display}[/yellow]")

    total = len(navigator.universe)
    _render_day(navigator.selected, navigator.current(), navigator.index, total)

    while interactive:
        action = click.prompt(
            "[n]ext, [p]revious, [j]ump, [q]uit",
            type=click.Choice(["n", "p", "j", "q"]),
            default="q",
            show_choices=False
        )
        if action == "q":
            break
        if action == "n":
            result = navigator.next()
        elif action == "p":
            result = navigator.previous()
        else:
            position = click.prompt(f"Day number (1-{total})", type=int)
            result = navigator.jump_to(position - 1)

        if result.ok:
            _render_day(navigator.selected, navigator.current(), navigator.index, total)
        else:
            console.print(f"[dim]{NAVIGATION_MESSAGES[result.status]}[/dim]")


@cli.command(name="on-this-day")
@click.option("--date", "-d", "day", default=None, help="Day to look back on (MM-DD, default today)")
@click.pass_context
def on_this_day(ctx, day: Optional[str]):
    """Memories from this calendar day in past years."""
    day_key = _parse_day_option(day) or to_day_key(date.today())

    try:
        memories = MemoryStore().list_memories(_owner(ctx))
    except Exception as e:
        console.print(f"[red]✗[/red] Error loading memories: {e}", style="red")
        logger.error(f"Error in on-this-day command: {e}", exc_info=True)
        sys.exit(1)

    matches = build_index(memories).on_day(day_key)
    if not matches:
        console.print(f"[yellow]No memories on {day_key.display} yet[/yellow]")
        return

    console.print(f"[bold cyan]On {day_key.display}[/bold cyan] [dim]({len(matches)} memories)[/dim]")
    for match in matches:
        console.print(_memory_panel(match.record, title=str(match.display_year)))


@cli.command()
def moods():
    """List the moods a memory can have."""
    for mood in Mood:
        console.print(mood.badge)


@cli.command()
@click.pass_context
def stats(ctx):
    """Show journal statistics."""
    try:
        stats = MemoryStore().get_stats(_owner(ctx))
    except Exception as e:
        console.print(f"[red]✗[/red] Error getting stats: {e}", style="red")
        logger.error(f"Error in stats command: {e}", exc_info=True)
        sys.exit(1)

    mood_lines = "\n".join(
        f"  {Mood.parse(label).badge}: {count}"
        for label, count in sorted(stats['by_mood'].items(), key=lambda item: -item[1])
    )
    years = ", ".join(str(y) for y in stats['years']) or "-"

    stats_text = f"""
[cyan]Total Memories:[/cyan] {stats['total_memories']}
[cyan]First Memory:[/cyan] {stats['first_date'] or '-'}
[cyan]Latest Memory:[/cyan] {stats['last_date'] or '-'}
[cyan]Years:[/cyan] {years}
[cyan]Database:[/cyan] {stats['db_path']}
    """.strip()
    if mood_lines:
        stats_text += f"\n[cyan]By Mood:[/cyan]\n{mood_lines}"

    console.print(Panel(
        stats_text,
        title="📊 Journal Statistics",
        border_style="cyan",
        box=box.DOUBLE
    ))


from memorybender.cli_profile import profile_group
cli.add_command(profile_group, name='profile')


if __name__ == "__main__":
    cli()
