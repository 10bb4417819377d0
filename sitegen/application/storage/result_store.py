from pathlib import Path
from datetime import datetime, timezone
import json
import shutil
from typing import Any

from sitegen.domain.models.generation import GenerationResult
from sitegen.domain.constants import (
    DEFAULT_RESULTS_ROOT,
    FRAGMENT_FILENAME,
    FRAGMENT_TEMP_SUFFIX,
    RESULT_FILES_DIRNAME,
)


class ResultStore:
    """Persists finished generations per project (a ResultSink).

    Layout:
        <results_root>/<project_id>/fragment.json   result + timestamp
        <results_root>/<project_id>/files/<path>    generated files
    """

    def __init__(self, results_root: Path | None = None):
        """
        Initialize the result store.

        Args:
            results_root: Root directory for all results (default: .sitegen/results)
        """
        self.results_root = results_root or DEFAULT_RESULTS_ROOT
        self.results_root.mkdir(parents=True, exist_ok=True)

    def save(self, project_id: str, result: GenerationResult) -> Path:
        """
        Write generated files and fragment.json for a project.

        Replaces any previous result for the project.

        Args:
            project_id: The project identifier
            result: The finished generation

        Returns:
            Path to the saved fragment.json

        Raises:
            ValueError: If project_id or a file path escapes the store
        """
        project_dir = self._project_dir(project_id)
        files_dir = project_dir / RESULT_FILES_DIRNAME

        targets = {rel: self._resolve_inside(files_dir, rel) for rel in result.files}

        if files_dir.exists():
            shutil.rmtree(files_dir)
        files_dir.mkdir(parents=True, exist_ok=True)

        for rel, target in targets.items():
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(result.files[rel], encoding="utf-8")

        fragment_file = project_dir / FRAGMENT_FILENAME
        temp_file = fragment_file.with_suffix(FRAGMENT_TEMP_SUFFIX)

        data = self._serialize(project_id, result)

        # Write atomically - write to temp, then rename
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        temp_file.replace(fragment_file)

        return fragment_file

    def load(self, project_id: str) -> GenerationResult | None:
        """
        Load the saved result for a project.

        Returns:
            The result, or None if nothing has been handed off yet

        Raises:
            ValueError: If fragment.json is invalid
        """
        fragment_file = self._project_dir(project_id) / FRAGMENT_FILENAME
        if not fragment_file.exists():
            return None

        with open(fragment_file, "r", encoding="utf-8") as f:
            data = json.load(f)

        try:
            return GenerationResult(**data["result"])
        except Exception as e:
            raise ValueError(f"Invalid result data for project '{project_id}': {e}") from e

    def exists(self, project_id: str) -> bool:
        return (self._project_dir(project_id) / FRAGMENT_FILENAME).exists()

    def list_projects(self) -> list[str]:
        """
        List project IDs with a saved result.
        """
        if not self.results_root.exists():
            return []

        projects = []
        for project_dir in self.results_root.iterdir():
            if project_dir.is_dir() and (project_dir / FRAGMENT_FILENAME).exists():
                projects.append(project_dir.name)

        return sorted(projects)

    def delete(self, project_id: str) -> None:
        """
        Delete a project's result and files.

        Raises:
            FileNotFoundError: If nothing is stored for the project
        """
        project_dir = self._project_dir(project_id)

        if not project_dir.exists():
            raise FileNotFoundError(f"No result stored for project '{project_id}'")

        shutil.rmtree(project_dir)

    def _project_dir(self, project_id: str) -> Path:
        return self._resolve_inside(self.results_root, project_id)

    @staticmethod
    def _resolve_inside(root: Path, rel: str) -> Path:
        """Resolve `rel` under `root`, rejecting absolute paths and escapes."""
        if not rel or Path(rel).is_absolute():
            raise ValueError(f"Invalid path: '{rel}'")
        root_resolved = root.resolve()
        target = (root / rel).resolve()
        if target == root_resolved or root_resolved not in target.parents:
            raise ValueError(f"Path escapes result directory: '{rel}'")
        return target

    def _serialize(self, project_id: str, result: GenerationResult) -> dict[str, Any]:
        return {
            "project_id": project_id,
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "result": result.model_dump(mode="json"),
        }
