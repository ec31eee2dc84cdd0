"""Prompt management

Prompts are stored as Markdown files and support template substitution.

Usage:
    from studioflow.core.prompts import get_prompt

    prompt = get_prompt("social/post", brand_name="Hispania Colors", product_json="{...}")
"""

import functools
from pathlib import Path
from string import Template

PROMPTS_DIR = Path(__file__).parent


@functools.lru_cache(maxsize=32)
def _load_prompt_file(prompt_path: str) -> str:
    """Load a prompt file (LRU cached)

    Args:
        prompt_path: Relative prompt path, e.g. "social/post"

    Raises:
        FileNotFoundError: The prompt file does not exist
    """
    file_path = PROMPTS_DIR / f"{prompt_path}.md"

    if not file_path.exists():
        raise FileNotFoundError(
            f"Prompt file not found: {prompt_path}.md\n"
            f"Expected location: {file_path}"
        )

    return file_path.read_text(encoding="utf-8")


def get_prompt(prompt_path: str, **kwargs) -> str:
    """Load a prompt and substitute ``$variable`` placeholders

    Examples:
        >>> get_prompt("social/post", brand_name="Acme", product_json="{}", style_block="")
    """
    raw_prompt = _load_prompt_file(prompt_path)

    if not kwargs:
        return raw_prompt

    return Template(raw_prompt).safe_substitute(**kwargs)


def list_prompts() -> list[str]:
    """List available prompt paths, e.g. ["social/post"]"""
    prompts = []
    for md_file in PROMPTS_DIR.rglob("*.md"):
        if md_file.name == "README.md":
            continue
        rel_path = md_file.relative_to(PROMPTS_DIR)
        prompts.append(str(rel_path.with_suffix("")).replace("\\", "/"))
    return sorted(prompts)


def reload_cache():
    """Clear the prompt cache (hot reload during development)"""
    _load_prompt_file.cache_clear()


__all__ = ["get_prompt", "list_prompts", "reload_cache"]
