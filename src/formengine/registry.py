"""Template registry - index form templates by id.

Example usage:
    from formengine import TemplateRegistry

    registry = TemplateRegistry()
    registry.load_directory("server/seeds")
    template = registry.get("nshev")
"""

from collections.abc import Iterator
from pathlib import Path

from .errors import TemplateError
from .models import FormTemplate
from .service import YAML_SUFFIXES, load_template

TEMPLATE_SUFFIXES = {".json"} | YAML_SUFFIXES


class TemplateRegistry:
    """In-memory index of templates loaded from files or added directly."""

    def __init__(self):
        self._templates: dict[str, FormTemplate] = {}
        self._sources: dict[str, Path] = {}  # template id -> file it came from
        self.load_errors: list[tuple[Path, str]] = []  # (filepath, error_message)

    def add(self, template: FormTemplate, source: Path | None = None) -> None:
        """Register a template; ids must be unique."""
        if template.id in self._templates:
            where = self._sources.get(template.id)
            raise TemplateError(
                f"duplicate template id {template.id!r}" + (f" (already loaded from {where})" if where else "")
            )
        self._templates[template.id] = template
        if source is not None:
            self._sources[template.id] = source

    def load_file(self, filepath: str | Path) -> FormTemplate:
        filepath = Path(filepath)
        template = load_template(filepath)
        self.add(template, filepath)
        return template

    def load_directory(self, base_path: str | Path) -> int:
        """Load every template file under `base_path`.

        Files that fail to load are recorded in `load_errors` and skipped.

        Returns:
            Number of templates loaded
        """
        base = Path(base_path)
        if not base.is_dir():
            raise FileNotFoundError(f"No template directory at {base_path}")

        count = 0
        for filepath in sorted(base.rglob("*")):
            if filepath.suffix.lower() not in TEMPLATE_SUFFIXES or not filepath.is_file():
                continue
            try:
                self.load_file(filepath)
                count += 1
            except TemplateError as e:
                self.load_errors.append((filepath, str(e)))

        return count

    def get(self, template_id: str) -> FormTemplate | None:
        return self._templates.get(template_id)

    def list(self) -> Iterator[FormTemplate]:
        """Templates in registration order."""
        yield from self._templates.values()

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)
