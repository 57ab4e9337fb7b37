"""
Immutable search path and process environment passed between steps.

Steps never touch ``os.environ``. Each one receives an ``Environment`` and
returns a new one; subprocesses get ``os.environ`` overlaid with it.
"""

import os
import shutil
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field

PathLike = Union[str, Path]


class SearchPath(BaseModel):
    """Ordered list of directories consulted to resolve a command name."""
    entries: Tuple[str, ...] = Field(default_factory=tuple)

    class Config:
        frozen = True

    @classmethod
    def parse(cls, value: Optional[str]) -> "SearchPath":
        """Build from a ``PATH``-style string."""
        if not value:
            return cls()
        return cls(entries=tuple(e for e in value.split(os.pathsep) if e))

    def __contains__(self, directory: object) -> bool:
        return str(directory) in self.entries

    def __str__(self) -> str:
        return os.pathsep.join(self.entries)

    def prepend(self, *directories: PathLike) -> "SearchPath":
        """
        Return a new search path with the directories in front.

        The first argument ends up first. Later duplicates are dropped so a
        directory appears once.
        """
        front = []
        for directory in directories:
            d = str(directory)
            if d not in front:
                front.append(d)
        rest = [e for e in self.entries if e not in front]
        return SearchPath(entries=tuple(front + rest))

    def prepend_if_missing(self, directory: PathLike) -> "SearchPath":
        if directory in self:
            return self
        return self.prepend(directory)

    def prepend_existing(self, directories: Iterable[PathLike]) -> "SearchPath":
        """Prepend each directory that exists, in order, so the last one ends up first."""
        path = self
        for directory in directories:
            if Path(directory).is_dir():
                path = path.prepend(directory)
        return path

    def which(self, name: str) -> Optional[str]:
        """Resolve a command name against this search path only."""
        if not self.entries:
            return None
        return shutil.which(name, path=str(self))


def find_in_directories(name: str, directories: Sequence[PathLike]) -> Optional[Path]:
    """Return the first candidate directory holding a file called ``name``."""
    for directory in directories:
        candidate = Path(directory) / name
        if candidate.is_file():
            return Path(directory)
    return None


class Environment(BaseModel):
    """Search path plus extra variables handed to every subprocess."""
    search_path: SearchPath = Field(default_factory=SearchPath)
    variables: Dict[str, str] = Field(default_factory=dict)

    class Config:
        frozen = True

    @classmethod
    def from_process(cls, environ: Optional[Mapping[str, str]] = None) -> "Environment":
        """Snapshot the starting search path. Other variables are inherited at run time."""
        environ = os.environ if environ is None else environ
        return cls(search_path=SearchPath.parse(environ.get("PATH")))

    def with_search_path(self, search_path: SearchPath) -> "Environment":
        return Environment(search_path=search_path, variables=dict(self.variables))

    def with_variables(self, **variables: str) -> "Environment":
        merged = dict(self.variables)
        merged.update(variables)
        return Environment(search_path=self.search_path, variables=merged)

    def which(self, name: str) -> Optional[str]:
        return self.search_path.which(name)

    def to_env(self, overrides: Optional[Mapping[str, str]] = None,
               base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """Full environment mapping for a subprocess."""
        env = dict(os.environ if base is None else base)
        env.update(self.variables)
        env["PATH"] = str(self.search_path)
        if overrides:
            env.update(overrides)
        return env
