"""JSON file store for translation projects."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

from .errors import StoreError
from .models import StyleExample, TranslationProject
from .sampler import DEFAULT_TRAINING_LIMIT, sample_training_examples

logger = logging.getLogger(__name__)

PROJECT_SUFFIX = ".json"


class ProjectStore:
    """项目存储：每个项目一个 JSON 文件。"""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, project_id: str) -> Path:
        return self.directory / f"{project_id}{PROJECT_SUFFIX}"

    def save(self, project: TranslationProject) -> None:
        """Insert or replace a project."""
        path = self._path(project.id)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with path.open('w', encoding='utf-8') as f:
                json.dump(project.to_dict(), f, ensure_ascii=False, indent=2)
        except OSError as e:
            raise StoreError(f"Failed to save project {project.id}: {e}") from e

        logger.debug(f"Project saved to {path}")

    def get(self, project_id: str) -> Optional[TranslationProject]:
        """Load one project, None if it does not exist or cannot be read."""
        return self._load(self._path(project_id))

    def _load(self, path: Path) -> Optional[TranslationProject]:
        if not path.exists():
            return None

        try:
            with path.open('r', encoding='utf-8') as f:
                data = json.load(f)
            return TranslationProject.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Failed to load project file {path.name}: {e}")
            return None

    def list_projects(self) -> List[TranslationProject]:
        """Return all readable projects, newest first."""
        if not self.directory.is_dir():
            return []

        projects: List[TranslationProject] = []
        for path in sorted(self.directory.glob(f"*{PROJECT_SUFFIX}")):
            project = self._load(path)
            if project is not None:
                projects.append(project)

        projects.sort(key=lambda p: p.created_at, reverse=True)
        return projects

    def delete(self, project_id: str) -> None:
        """Remove a project; unknown ids are ignored."""
        path = self._path(project_id)
        try:
            if path.exists():
                path.unlink()
                logger.debug(f"Project deleted: {path}")
        except OSError as e:
            raise StoreError(f"Failed to delete project {project_id}: {e}") from e


def load_training_examples(
    store: ProjectStore,
    limit: int = DEFAULT_TRAINING_LIMIT,
) -> List[StyleExample]:
    """Sample training examples from everything saved in ``store``."""
    return sample_training_examples(store.list_projects(), limit)
