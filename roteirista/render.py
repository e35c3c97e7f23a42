"""Pure view description built from controller state."""

from __future__ import annotations

from dataclasses import dataclass, field

from roteirista.models import BlockKind, GeneratedContent, full_script_text

BLOCK_TITLES = {
    BlockKind.SCRIPT: "📜 Roteiro Principal",
    BlockKind.TITLES: "🎯 Títulos Sugeridos",
    BlockKind.DESCRIPTION: "📝 Descrição (SEO)",
    BlockKind.TAGS: "🏷️ Tags",
    BlockKind.THUMBNAIL_PROMPTS: "🖼️ Prompts para Thumbnail",
}


@dataclass
class BlockView:
    block: BlockKind
    title: str
    loading: bool
    value: object = None
    copy_text: str = ""


@dataclass
class HistoryEntryView:
    id: str
    project_name: str
    timestamp: str
    active: bool


@dataclass
class View:
    mode: str
    error: str | None
    summary: dict = field(default_factory=dict)
    blocks: list[BlockView] = field(default_factory=list)
    history: list[HistoryEntryView] = field(default_factory=list)
    api_key: str = ""
    persist_api_key: bool = False


def block_copy_text(content: GeneratedContent, block: BlockKind | str) -> str:
    """Text placed on the clipboard for a block."""
    block = BlockKind(block)
    value = getattr(content, block.attr)
    if block == BlockKind.SCRIPT:
        return full_script_text(value)
    if block == BlockKind.TAGS:
        return ", ".join(value)
    if isinstance(value, list):
        return "\n".join(value)
    return value


def render(controller, reveal_key: bool = False) -> View:
    request = controller.request
    view = View(
        mode=controller.mode.value,
        error=controller.error,
        summary={
            "project": request.project_name,
            "story": request.story_prompt[:50],
            "tone": request.tone.value,
        },
        api_key=controller.credentials.api_key if reveal_key else controller.credentials.masked(),
        persist_api_key=controller.credentials.persist,
    )

    content = controller.content
    if content is not None:
        for block in BlockKind:
            loading = bool(controller.reloading.get(block))
            view.blocks.append(
                BlockView(
                    block=block,
                    title=BLOCK_TITLES[block],
                    loading=loading,
                    value=None if loading else getattr(content, block.attr),
                    copy_text="" if loading else block_copy_text(content, block),
                )
            )

    for record in controller.history.records:
        view.history.append(
            HistoryEntryView(
                id=record.id,
                project_name=record.request.project_name or "Roteiro Sem Título",
                timestamp=record.timestamp.strftime("%d/%m/%Y %H:%M"),
                active=record.id == controller.active_id,
            )
        )
    return view
