"""Script package generation over an OpenAI-compatible chat API.

Two calls: one generates the whole package (script, titles, description,
tags, thumbnail prompts), the other regenerates a single block using the
current script as context. Both request schema-constrained JSON.
"""

from __future__ import annotations

import json
import logging

import openai

from roteirista.config import settings
from roteirista.errors import GenerationFailed, MissingCredential, RegenerationFailed
from roteirista.models import (
    BlockKind,
    GeneratedContent,
    GenerationRequest,
    ScriptContent,
    script_from_dict,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
Você é o "Roteirista Bíblico", um especialista em criar roteiros de vídeo emocionantes \
e respeitosos baseados em histórias da Bíblia para o YouTube. Seu estilo é cinematográfico, \
inspirador e fiel às escrituras. Todo o texto gerado DEVE estar exclusivamente em português \
do Brasil. Você sempre gera o conteúdo no formato JSON solicitado. Evite sermões longos e \
priorize uma narrativa envolvente."""

STRING_LIST_SCHEMA = {"type": "array", "items": {"type": "string"}}

SCRIPT_SCHEMA = {
    "type": "object",
    "properties": {
        "introduction": {
            "type": "string",
            "description": "Introdução do roteiro, com contexto e um gancho emocional.",
        },
        "development": {
            "type": "string",
            "description": "O desenvolvimento principal da história, dividido em parágrafos claros. "
            "Deve conter o corpo principal do roteiro.",
        },
        "conclusion": {
            "type": "string",
            "description": "A conclusão do roteiro, com a mensagem final e uma chamada para ação.",
        },
    },
    "required": ["introduction", "development", "conclusion"],
    "additionalProperties": False,
}

CONTENT_SCHEMA = {
    "type": "object",
    "properties": {
        "script": SCRIPT_SCHEMA,
        "titles": {**STRING_LIST_SCHEMA, "description": "Uma lista de 5 títulos criativos e otimizados para SEO."},
        "description": {
            "type": "string",
            "description": "Uma descrição persuasiva para o YouTube com até 2000 caracteres.",
        },
        "tags": {**STRING_LIST_SCHEMA, "description": "Uma lista de pelo menos 10 tags relevantes."},
        "thumbnailPrompts": {
            **STRING_LIST_SCHEMA,
            "description": "Uma lista de 3 prompts descritivos para uma IA de imagem gerar thumbnails.",
        },
    },
    "required": ["script", "titles", "description", "tags", "thumbnailPrompts"],
    "additionalProperties": False,
}

BLOCK_SCHEMAS = {
    BlockKind.SCRIPT: SCRIPT_SCHEMA,
    BlockKind.TITLES: STRING_LIST_SCHEMA,
    BlockKind.DESCRIPTION: {"type": "string"},
    BlockKind.TAGS: STRING_LIST_SCHEMA,
    BlockKind.THUMBNAIL_PROMPTS: STRING_LIST_SCHEMA,
}

BLOCK_ASKS = {
    BlockKind.TITLES: "Gere 5 novos títulos criativos e otimizados para SEO para este vídeo. "
    "A resposta deve ser uma lista de strings.",
    BlockKind.DESCRIPTION: "Gere uma nova descrição para o YouTube (até 2000 caracteres), que seja "
    "persuasiva, resuma a história e inclua uma chamada para ação.",
    BlockKind.TAGS: "Com base no roteiro e nos títulos, gere uma nova lista de pelo menos 10 tags "
    "(palavras-chave) relevantes para o YouTube. A resposta deve ser uma lista de strings.",
    BlockKind.THUMBNAIL_PROMPTS: "Gere 3 novos prompts detalhados para uma IA de imagem criar "
    "thumbnails cinematográficas para este vídeo. A resposta deve ser uma lista de strings.",
}

DEFAULT_ADJUSTMENT = "Gere uma nova versão aprimorada do conteúdo abaixo."
DEVELOPMENT_CONTEXT_CHARS = 800


def _build_generation_prompt(request: GenerationRequest) -> str:
    verses = (
        "Sim, de forma integrada e natural." if request.include_verses
        else "Não, foque apenas na narrativa."
    )
    reflections = (
        "Sim, adicione reflexões curtas e impactantes ao final." if request.include_reflections
        else "Não, mantenha o foco na história."
    )
    return (
        "Gere um pacote completo de conteúdo para um vídeo do YouTube de aproximadamente "
        f'10 minutos com base no seguinte prompt: "{request.story_prompt}".\n\n'
        "Siga estritamente as seguintes especificações:\n"
        f"- Nome do Projeto: {request.project_name}\n"
        f"- Tom: {request.tone.value}\n"
        f"- Estrutura: {request.structure.value}\n"
        f"- Incluir Versículos: {verses}\n"
        f"- Incluir Reflexões Pessoais: {reflections}\n"
        f"- Público-alvo: {request.target_audience}\n\n"
        "O roteiro (script) deve ser dividido em 'introduction', 'development' e 'conclusion'.\n"
        "O conteúdo total do roteiro deve ser de aproximadamente 1500-1600 palavras.\n\n"
        "Considere estas ideias iniciais do usuário (use como inspiração, mas crie as suas próprias):\n"
        f"- Ideias de Títulos: {request.title_hints or 'Nenhuma'}\n"
        f"- Ideias de Descrição: {request.description_hints or 'Nenhuma'}\n"
        f"- Ideias de Thumbnails: {request.thumbnail_hints or 'Nenhuma'}\n\n"
        "O resultado DEVE ser um objeto JSON que obedece ao schema fornecido."
    )


def _build_regeneration_prompt(
    block: BlockKind,
    request: GenerationRequest,
    existing: GeneratedContent,
    instruction: str,
) -> str:
    adjustment = (
        f'Ajuste o conteúdo seguindo esta instrução específica do usuário: "{instruction}".'
        if instruction.strip()
        else DEFAULT_ADJUSTMENT
    )

    if block == BlockKind.SCRIPT:
        return (
            f'Com base nas preferências do usuário (história: "{request.story_prompt}", '
            f"tom: {request.tone.value}), gere um novo roteiro completo de ~10 minutos. "
            "O roteiro DEVE ser dividido em 'introduction', 'development' e 'conclusion'. "
            f"{adjustment}"
        )

    script = existing.script
    script_context = (
        f"Introdução: {script.introduction}\n"
        f"Desenvolvimento: {script.development[:DEVELOPMENT_CONTEXT_CHARS]}...\n"
        f"Conclusão: {script.conclusion}"
    )
    context = (
        f'Contexto: A história é sobre "{request.story_prompt}" com um tom {request.tone.value} '
        f"para um público de {request.target_audience}. O roteiro principal é:\n\n{script_context}"
    )
    return f"{context}\n\n{adjustment}\n\n{BLOCK_ASKS[block]}"


def _response_format(name: str, schema: dict) -> dict:
    return {
        "type": "json_schema",
        "json_schema": {"name": name, "schema": schema, "strict": True},
    }


async def _complete_json(credential: str, prompt: str, response_format: dict) -> dict:
    client = openai.AsyncOpenAI(
        api_key=credential,
        base_url=settings.api_base_url,
        timeout=settings.request_timeout,
        max_retries=0,
    )
    response = await client.chat.completions.create(
        model=settings.llm_model,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        response_format=response_format,
        temperature=settings.temperature,
    )

    if not response.choices:
        raise ValueError("no choices in response")
    raw = response.choices[0].message.content
    if not raw:
        raise ValueError("empty response from model")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _normalize_tags(value) -> list[str]:
    # The model occasionally returns tags as one comma-separated string.
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",")]
    return _string_list(value, "tags")


def _string_list(value, name: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"'{name}' must be a list of strings")
    return list(value)


def _parse_script(value) -> ScriptContent:
    if not isinstance(value, dict):
        raise ValueError("'script' must be an object")
    script = script_from_dict(value)
    for part in ("introduction", "development", "conclusion"):
        if not isinstance(getattr(script, part), str):
            raise ValueError(f"'script.{part}' must be a string")
    return script


def _parse_content(data: dict) -> GeneratedContent:
    description = data["description"]
    if not isinstance(description, str):
        raise ValueError("'description' must be a string")
    return GeneratedContent(
        script=_parse_script(data["script"]),
        titles=_string_list(data["titles"], "titles"),
        description=description,
        tags=_normalize_tags(data["tags"]),
        thumbnail_prompts=_string_list(data["thumbnailPrompts"], "thumbnailPrompts"),
    )


def _parse_block(block: BlockKind, value):
    if block == BlockKind.SCRIPT:
        return _parse_script(value)
    if block == BlockKind.DESCRIPTION:
        if not isinstance(value, str):
            raise ValueError("'description' must be a string")
        return value
    if block == BlockKind.TAGS:
        return _normalize_tags(value)
    return _string_list(value, block.value)


async def generate_content(request: GenerationRequest, credential: str) -> GeneratedContent:
    """Generate the full content package for a request.

    Raises MissingCredential before any network call when *credential* is
    blank, and GenerationFailed on transport or response-shape errors.
    """
    if not credential or not credential.strip():
        raise MissingCredential()

    prompt = _build_generation_prompt(request)
    logger.info("Generating content for project %r", request.project_name)

    try:
        data = await _complete_json(credential, prompt, _response_format("generated_content", CONTENT_SCHEMA))
        content = _parse_content(data)
    except (openai.OpenAIError, ValueError, KeyError, TypeError, IndexError, AttributeError) as exc:
        logger.error("Error generating full script: %s", exc)
        raise GenerationFailed() from exc

    logger.info(
        "Content generated: %d titles, %d tags, %d thumbnail prompts",
        len(content.titles),
        len(content.tags),
        len(content.thumbnail_prompts),
    )
    return content


async def regenerate_block(
    block: BlockKind | str,
    request: GenerationRequest,
    existing_content: GeneratedContent,
    instruction: str,
    credential: str,
) -> ScriptContent | list[str] | str:
    """Regenerate one block, using the current script as context.

    *existing_content* is only read. Returns the new value for the block.
    """
    block = BlockKind(block)
    if not credential or not credential.strip():
        raise MissingCredential()

    prompt = _build_regeneration_prompt(block, request, existing_content, instruction or "")
    schema = {
        "type": "object",
        "properties": {"result": BLOCK_SCHEMAS[block]},
        "required": ["result"],
        "additionalProperties": False,
    }
    logger.info("Regenerating block %s for project %r", block.value, request.project_name)

    try:
        data = await _complete_json(credential, prompt, _response_format(f"{block.value}_result", schema))
        return _parse_block(block, data["result"])
    except (openai.OpenAIError, ValueError, KeyError, TypeError, IndexError, AttributeError) as exc:
        logger.error("Error regenerating %s: %s", block.value, exc)
        raise RegenerationFailed(block.value) from exc
