from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class Tone(str, Enum):
    INSPIRADOR = "Inspirador"
    NARRATIVO = "Narrativo"
    REFLEXIVO = "Reflexivo"
    EDUCATIVO = "Educativo"
    DRAMATICO = "Dramático"


class Structure(str, Enum):
    PADRAO = "Introdução, Desenvolvimento e Conclusão"
    PERSONALIZADA = "Personalizada"


class BlockKind(str, Enum):
    SCRIPT = "script"
    TITLES = "titles"
    DESCRIPTION = "description"
    TAGS = "tags"
    THUMBNAIL_PROMPTS = "thumbnailPrompts"

    @property
    def attr(self) -> str:
        """Attribute name on GeneratedContent."""
        return _BLOCK_ATTRS[self]


_BLOCK_ATTRS = {
    BlockKind.SCRIPT: "script",
    BlockKind.TITLES: "titles",
    BlockKind.DESCRIPTION: "description",
    BlockKind.TAGS: "tags",
    BlockKind.THUMBNAIL_PROMPTS: "thumbnail_prompts",
}


@dataclass(frozen=True)
class GenerationRequest:
    project_name: str
    story_prompt: str
    tone: Tone = Tone.INSPIRADOR
    structure: Structure = Structure.PADRAO
    include_verses: bool = True
    include_reflections: bool = True
    title_hints: str = ""
    description_hints: str = ""
    thumbnail_hints: str = ""
    target_audience: str = "Público geral"


DEFAULT_REQUEST = GenerationRequest(
    project_name="Novo Roteiro",
    story_prompt="A história de Davi e Golias, com foco na coragem e fé contra todas as probabilidades.",
)


@dataclass(frozen=True)
class ScriptContent:
    introduction: str
    development: str
    conclusion: str


@dataclass(frozen=True)
class GeneratedContent:
    script: ScriptContent
    titles: list[str]
    description: str
    tags: list[str]
    thumbnail_prompts: list[str]


@dataclass(frozen=True)
class HistoryRecord:
    id: str
    request: GenerationRequest
    content: GeneratedContent
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def with_block(content: GeneratedContent, block: BlockKind, value) -> GeneratedContent:
    """Return a copy of *content* with a single block replaced."""
    return dataclasses.replace(content, **{BlockKind(block).attr: value})


def full_script_text(script: ScriptContent) -> str:
    return (
        f"INTRODUÇÃO\n\n{script.introduction}\n\n---\n\n"
        f"DESENVOLVIMENTO\n\n{script.development}\n\n---\n\n"
        f"CONCLUSÃO\n\n{script.conclusion}"
    )


# ---------------------------------------------------------------------------
# Dict conversion (camelCase keys, as stored and as returned by the model)
# ---------------------------------------------------------------------------


def request_to_dict(request: GenerationRequest) -> dict:
    return {
        "projectName": request.project_name,
        "story": request.story_prompt,
        "tone": request.tone.value,
        "structure": request.structure.value,
        "includeVerses": request.include_verses,
        "includeReflections": request.include_reflections,
        "titleIdeas": request.title_hints,
        "descriptionIdeas": request.description_hints,
        "thumbnailIdeas": request.thumbnail_hints,
        "targetAudience": request.target_audience,
    }


def request_from_dict(d: dict) -> GenerationRequest:
    return GenerationRequest(
        project_name=d["projectName"],
        story_prompt=d["story"],
        tone=Tone(d["tone"]),
        structure=Structure(d["structure"]),
        include_verses=bool(d["includeVerses"]),
        include_reflections=bool(d["includeReflections"]),
        title_hints=d.get("titleIdeas") or "",
        description_hints=d.get("descriptionIdeas") or "",
        thumbnail_hints=d.get("thumbnailIdeas") or "",
        target_audience=d["targetAudience"],
    )


def script_from_dict(d: dict) -> ScriptContent:
    return ScriptContent(
        introduction=d["introduction"],
        development=d["development"],
        conclusion=d["conclusion"],
    )


def content_to_dict(content: GeneratedContent) -> dict:
    return {
        "script": dataclasses.asdict(content.script),
        "titles": list(content.titles),
        "description": content.description,
        "tags": list(content.tags),
        "thumbnailPrompts": list(content.thumbnail_prompts),
    }


def content_from_dict(d: dict) -> GeneratedContent:
    return GeneratedContent(
        script=script_from_dict(d["script"]),
        titles=list(d["titles"]),
        description=d["description"],
        tags=list(d["tags"]),
        thumbnail_prompts=list(d["thumbnailPrompts"]),
    )
