"""Roteirista Bíblico CLI — Bible-story video scripts, titles, tags and thumbnails."""

from __future__ import annotations

import asyncio
import logging

import click

from roteirista.controller import AppController, Mode
from roteirista.db import init_db
from roteirista.models import BlockKind, Structure, Tone
from roteirista.render import View, block_copy_text, render

BLOCK_CHOICES = [b.value for b in BlockKind]


@click.group()
@click.option("--api-key", envvar="GEMINI_API_KEY", default=None, help="API key for this run (not stored).")
@click.option("--verbose", "-v", is_flag=True, help="Show diagnostic logging.")
@click.pass_context
def cli(ctx, api_key, verbose):
    """Roteirista Bíblico — gere roteiros de vídeo sobre histórias da Bíblia.

        \b
        studio.py key set <KEY> --persist   # 1. Configure your API key
        studio.py generate --story "..."    # 2. Generate the full package
        studio.py adjust <ID> tags -i "..." # 3. Refine one block
        studio.py history list              # 4. Browse past generations
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    controller = AppController()
    controller.start()
    if api_key:
        controller.credentials.api_key = api_key
    ctx.obj = controller


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--project", "project_name", default=None, help="Project name.")
@click.option("--story", "story_prompt", default=None, help="Story prompt (be detailed).")
@click.option("--audience", "target_audience", default=None, help="Target audience.")
@click.option("--tone", type=click.Choice([t.value for t in Tone]), default=None)
@click.option("--structure", type=click.Choice([s.value for s in Structure]), default=None)
@click.option("--verses/--no-verses", "include_verses", default=None, help="Include Bible verses.")
@click.option("--reflections/--no-reflections", "include_reflections", default=None, help="Add personal reflections.")
@click.option("--title-ideas", "title_hints", default=None)
@click.option("--description-ideas", "description_hints", default=None)
@click.option("--thumbnail-ideas", "thumbnail_hints", default=None)
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def generate(controller: AppController, yes, **fields):
    """Generate script, titles, description, tags and thumbnail prompts."""
    changes = {k: v for k, v in fields.items() if v is not None}
    if "tone" in changes:
        changes["tone"] = Tone(changes["tone"])
    if "structure" in changes:
        changes["structure"] = Structure(changes["structure"])
    controller.update_request(**changes)

    _print_request(controller)
    controller.request_generation()
    if not yes and not click.confirm("\nPosso gerar o roteiro completo com base nesses dados?", default=True):
        controller.cancel_confirmation()
        click.echo("Cancelado.")
        return

    click.echo("Gerando roteiro...")
    record = asyncio.run(controller.confirm())
    if record is None:
        _fail(controller)

    _print_view(render(controller))
    click.echo(f"\nSaved to history: {record.id[:12]}")
    click.echo(f"Refine a block with: studio.py adjust {record.id[:12]} <block> -i \"...\"")


@cli.command()
@click.argument("record_id")
@click.argument("block", type=click.Choice(BLOCK_CHOICES))
@click.option("--instruction", "-i", default="", help="How to adjust the block (empty: improved version).")
@click.pass_obj
def adjust(controller: AppController, record_id, block, instruction):
    """Regenerate one block of a past generation."""
    record = _find_record(controller, record_id)
    if not record:
        return
    controller.load_record(record.id)

    click.echo(f"Ajustando {block}...")
    if not asyncio.run(controller.regenerate(block, instruction)):
        _fail(controller)

    view = render(controller)
    _print_block(next(b for b in view.blocks if b.block == BlockKind(block)))


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


@cli.group()
def history():
    """Browse and manage past generations."""


@history.command("list")
@click.option("--limit", default=20, help="Max records to show.")
@click.pass_obj
def list_history(controller: AppController, limit):
    """Show past generations, newest first."""
    view = render(controller)
    if not view.history:
        click.echo("Nenhum roteiro gerado ainda.")
        return
    for entry in view.history[:limit]:
        click.echo(f"  {entry.id[:12]}  {entry.timestamp}  {entry.project_name[:60]}")
    total = len(view.history)
    if total > limit:
        click.echo(f"\n  ... and {total - limit} more. Use --limit to show more.")


@history.command("show")
@click.argument("record_id")
@click.pass_obj
def show_history(controller: AppController, record_id):
    """Show a past generation in full (by ID prefix)."""
    record = _find_record(controller, record_id)
    if not record:
        return
    controller.load_record(record.id)
    _print_view(render(controller))


@history.command("delete")
@click.argument("record_id")
@click.option("--yes", "-y", is_flag=True)
@click.pass_obj
def delete_history(controller: AppController, record_id, yes):
    """Delete one past generation."""
    record = _find_record(controller, record_id)
    if not record:
        return
    name = record.request.project_name or "Roteiro Sem Título"
    if not yes and not click.confirm(
        f'Tem certeza que deseja apagar o roteiro "{name}"? Esta ação não pode ser desfeita.'
    ):
        return
    controller.delete_record(record.id)
    click.echo(f"Deleted {record.id[:12]}.")


@history.command("clear")
@click.option("--yes", "-y", is_flag=True)
@click.pass_obj
def clear_history(controller: AppController, yes):
    """Delete every past generation."""
    if not yes and not click.confirm(
        "Tem certeza que deseja apagar todo o histórico? Esta ação não pode ser desfeita."
    ):
        return
    controller.clear_history()
    click.echo("History cleared.")


@cli.command()
@click.argument("record_id")
@click.argument("block", type=click.Choice(BLOCK_CHOICES))
@click.pass_obj
def copy(controller: AppController, record_id, block):
    """Print a block exactly as it should be pasted."""
    record = _find_record(controller, record_id)
    if not record:
        return
    click.echo(block_copy_text(record.content, block))


# ---------------------------------------------------------------------------
# API key
# ---------------------------------------------------------------------------


@cli.group()
def key():
    """Manage the Gemini API key."""


@key.command("set")
@click.argument("api_key")
@click.option("--persist/--no-persist", default=None, help="Remember the key between runs.")
@click.pass_obj
def set_key(controller: AppController, api_key, persist):
    """Set the API key."""
    controller.set_api_key(api_key)
    if persist is not None:
        controller.set_persist_api_key(persist)
    if controller.credentials.persist:
        click.echo("API key saved.")
    else:
        click.echo("API key set for this run only. Use --persist to remember it.")


@key.command("show")
@click.option("--reveal", is_flag=True, help="Show the key unmasked.")
@click.pass_obj
def show_key(controller: AppController, reveal):
    """Show the current API key."""
    view = render(controller, reveal_key=reveal)
    click.echo(f"Key:     {view.api_key or '(none)'}")
    click.echo(f"Persist: {'yes' if view.persist_api_key else 'no'}")


@key.command("persist")
@click.argument("enabled", type=bool)
@click.pass_obj
def persist_key(controller: AppController, enabled):
    """Turn remembering the API key on or off."""
    controller.set_persist_api_key(enabled)
    click.echo(f"Persist: {'yes' if enabled else 'no'}")


@key.command("clear")
@click.pass_obj
def clear_key(controller: AppController):
    """Forget the API key."""
    controller.clear_api_key()
    click.echo("API key cleared.")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _find_record(controller: AppController, prefix: str):
    """Find a history record by ID prefix."""
    matches = [r for r in controller.history.records if r.id.startswith(prefix)]
    if not matches:
        click.echo(f"No record found matching '{prefix}'. Run 'history list' to see IDs.")
        return None
    if len(matches) > 1:
        click.echo(f"Multiple matches for '{prefix}'. Be more specific:")
        for r in matches:
            click.echo(f"  {r.id[:12]}  {r.request.project_name[:50]}")
        return None
    return matches[0]


def _fail(controller: AppController):
    raise click.ClickException(controller.error or "Ocorreu um erro desconhecido.")


def _print_request(controller: AppController):
    r = controller.request
    click.echo(f"Projeto:     {r.project_name}")
    click.echo(f"História:    {r.story_prompt}")
    click.echo(f"Público:     {r.target_audience}")
    click.echo(f"Tom:         {r.tone.value}")
    click.echo(f"Estrutura:   {r.structure.value}")
    click.echo(f"Versículos:  {'sim' if r.include_verses else 'não'}")
    click.echo(f"Reflexões:   {'sim' if r.include_reflections else 'não'}")


def _print_view(view: View):
    if view.mode != Mode.SHOWING.value:
        return
    click.echo("\n📖 Resumo da Geração")
    click.echo(f"  PROJETO: {view.summary['project']}")
    click.echo(f"  HISTÓRIA: {view.summary['story']}...")
    click.echo(f"  TOM: {view.summary['tone']}")
    for block in view.blocks:
        _print_block(block)


def _print_block(block):
    click.echo(f"\n{block.title}")
    click.echo("-" * 60)
    if block.loading:
        click.echo("  (carregando...)")
        return
    if block.block in (BlockKind.TITLES, BlockKind.THUMBNAIL_PROMPTS):
        for i, item in enumerate(block.value, 1):
            click.echo(f"  {i}. {item}")
    else:
        click.echo(block.copy_text)


if __name__ == "__main__":
    cli()
