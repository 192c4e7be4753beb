"""
CLI Commands for Profile Management

Commands:
- memorybender profile show   # Show your profile
- memorybender profile set    # Update names or avatar
"""

import logging
import sys

import click
from rich.console import Console
from rich.panel import Panel
from rich import box

from memorybender.image_store import ImageStore, ImageTooLargeError
from memorybender.profiles import ProfileStore

console = Console()
logger = logging.getLogger(__name__)


@click.group(name='profile')
def profile_group():
    """Manage your profile"""
    pass


@profile_group.command(name='show')
@click.pass_context
def show_profile(ctx):
    """Show your profile"""
    owner_id = ctx.obj["owner_id"]
    try:
        profile = ProfileStore().get_profile(owner_id)
    except Exception as e:
        console.print(f"[red]✗ Error loading profile: {e}[/red]")
        logger.error(f"Error in profile show: {e}", exc_info=True)
        sys.exit(1)

    if not profile:
        console.print(f"[yellow]No profile yet for {owner_id}.[/yellow]")
        console.print("\n[dim]💡 Create one with: [bold]memorybender profile set --display-name <name>[/bold][/dim]\n")
        return

    content = f"""
[cyan]User:[/cyan] {profile.owner_id}
[cyan]First name:[/cyan] {profile.first_name or '-'}
[cyan]Last name:[/cyan] {profile.last_name or '-'}
[cyan]Display name:[/cyan] {profile.display_name or '-'}
[cyan]Avatar:[/cyan] {profile.avatar_ref or '-'}
    """

    console.print(Panel(
        content.strip(),
        title=f"👤 {profile.greeting_name}",
        border_style="cyan",
        box=box.ROUNDED
    ))


@profile_group.command(name='set')
@click.option('--first-name', default=None, help="First name ('' clears it)")
@click.option('--last-name', default=None, help="Last name ('' clears it)")
@click.option('--display-name', default=None, help="Display name ('' clears it)")
@click.option('--avatar', type=click.Path(exists=True, dir_okay=False), default=None, help='Avatar image (max 5MB)')
@click.pass_context
def set_profile(ctx, first_name, last_name, display_name, avatar):
    """Update your profile"""
    owner_id = ctx.obj["owner_id"]
    fields = {
        name: value
        for name, value in (
            ("first_name", first_name),
            ("last_name", last_name),
            ("display_name", display_name),
        )
        if value is not None
    }
    avatar_ref = None

    try:
        if avatar:
            avatar_ref = fields["avatar_ref"] = ImageStore().save(owner_id, avatar)

        if not fields:
            console.print("[yellow]Nothing to change[/yellow]")
            return

        profile = ProfileStore().upsert_profile(owner_id, **fields)
    except ImageTooLargeError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)
    except Exception as e:
        if avatar_ref:
            ImageStore().delete(avatar_ref)
        console.print(f"[red]✗ Error updating profile: {e}[/red]")
        logger.error(f"Error in profile set: {e}", exc_info=True)
        sys.exit(1)

    console.print(f"[green]✓[/green] Profile updated for {profile.greeting_name}")
