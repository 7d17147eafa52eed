"""Config file templates with named %PLACEHOLDER% tokens."""
import re
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, Mapping

from hostprov.errors import TemplateError

CONFIGS_DIR = Path(__file__).parent / "configs"
PLACEHOLDER_RE = re.compile(r"%([A-Z][A-Z0-9_]*)%")

ZSHRC_PLACEHOLDERS = frozenset({"GLOBAL_P10K", "GLOBAL_CUSTOM"})


@dataclass(frozen=True)
class ConfigTemplate:
    """Template text plus the exact set of placeholders it must contain."""

    name: str
    text: str
    placeholders: FrozenSet[str]

    def __post_init__(self):
        found = set(PLACEHOLDER_RE.findall(self.text))
        if found != set(self.placeholders):
            missing = sorted(set(self.placeholders) - found)
            unknown = sorted(found - set(self.placeholders))
            raise TemplateError(
                f"Template {self.name} placeholder mismatch (missing: {missing}, unknown: {unknown})"
            )

    def render(self, values: Mapping[str, object]) -> str:
        """Substitute every placeholder. All of them must be supplied."""
        if set(values) != set(self.placeholders):
            raise TemplateError(
                f"Template {self.name} expects {sorted(self.placeholders)}, got {sorted(values)}"
            )
        rendered = self.text
        for key, value in values.items():
            rendered = rendered.replace(f"%{key}%", str(value))
        return rendered


def load_template(filename: str, placeholders: Iterable[str]) -> ConfigTemplate:
    """Load a template shipped in the configs directory."""
    text = (CONFIGS_DIR / filename).read_text(encoding="utf-8")
    return ConfigTemplate(name=filename, text=text, placeholders=frozenset(placeholders))


def drop_line(text: str, line: str) -> str:
    """Remove every line exactly equal to ``line``."""
    kept = [current for current in text.splitlines(keepends=True) if current.rstrip("\n") != line]
    return "".join(kept)


def zshrc_template() -> ConfigTemplate:
    return load_template("zshrc.template", ZSHRC_PLACEHOLDERS)
