from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from metasync.core.descriptors.loader import DESCRIPTOR_SUFFIXES, DescriptorFileError, load_descriptor_file
from metasync.core.descriptors.models import MetadataRecordDescriptor

from .base import MetadataProvider, StaticMetadataProvider
from .common import CommonMetadataProvider

_log = logging.getLogger("metasync.registry")


def builtin_providers() -> List[MetadataProvider]:
    return [CommonMetadataProvider()]


def default_project_root(module_file: Optional[Path] = None) -> Path:
    """Source checkout root when running from one, else the working directory."""
    # metasync/core/providers/registry.py -> parents[3] = repo root
    root = Path(module_file or __file__).resolve().parents[3]
    if (root / "pyproject.toml").is_file():
        return root
    return Path.cwd()


class DescriptorRegistry:
    """Resolves metadata providers deterministically.

    Resolution order:
      1) Built-in providers (always present)
      2) Optional <descriptor_dir>/*.json|yaml|yml, sorted by file name
         (default descriptor_dir: <project_root>/templates/metadata, where
         project_root is the source checkout or, once installed, the cwd)

    A file provider with a built-in's name replaces it.
    """

    def __init__(self, project_root: Optional[Path] = None, *, descriptor_dir: Optional[Path] = None):
        if project_root is None:
            project_root = default_project_root()
        self.project_root = Path(project_root)
        self.descriptor_dir = Path(descriptor_dir) if descriptor_dir else self.project_root / "templates" / "metadata"
        self._providers: Dict[str, MetadataProvider] = {}
        self.warnings: List[Dict[str, str]] = []
        self._load_all()

    def _load_all(self) -> None:
        self._providers = {p.name: p for p in builtin_providers()}
        self.warnings = []

        if not self.descriptor_dir.exists():
            return

        for path in sorted(self.descriptor_dir.iterdir()):
            if path.suffix.lower() not in DESCRIPTOR_SUFFIXES or path.name.startswith("_"):
                continue
            try:
                name, descriptors = load_descriptor_file(path)
            except DescriptorFileError as exc:
                # Optional files: skip, keep the rest deterministic
                _log.warning("Skipping descriptor file %s: %s", path, exc)
                self.warnings.append({"code": "descriptors.load_failed", "path": str(path), "message": str(exc)})
                continue
            if name in self._providers:
                _log.info("Descriptor file %s overrides provider %s", path.name, name)
            self._providers[name] = StaticMetadataProvider(name, descriptors)

    def list_names(self) -> List[str]:
        """Built-ins first in declaration order, then file providers sorted."""
        builtin = [p.name for p in builtin_providers()]
        rest = sorted(n for n in self._providers if n not in builtin)
        return builtin + rest

    def get(self, name: str) -> Optional[MetadataProvider]:
        return self._providers.get(name)

    def providers(self) -> List[MetadataProvider]:
        return [self._providers[n] for n in self.list_names()]

    def descriptors(self, name: str) -> List[MetadataRecordDescriptor]:
        p = self.get(name)
        if p is None:
            raise KeyError(f"unknown metadata provider: {name}")
        return p.descriptors()
