"""
=============================================================================
ASSET STORE
=============================================================================

A flat directory of pre-bundled files (the "dist" folder) that the
server reads from.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       ASSET STORE LIFECYCLE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   bundle_dir/              populate()          root_dir/            │
    │   ├── index.html   ──────────────────────►     ├── index.html       │
    │   ├── index.css    (copy once, keep            ├── index.css        │
    │   └── index.js      existing files)            └── index.js         │
    │                                                                      │
    │   After population the directory is read-only from the server's   │
    │   point of view, so concurrent read() calls need no locking.       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
SECURITY: PATH CONTAINMENT
=============================================================================

Request paths are used verbatim as filenames, so a client could ask for
"/../secret.txt" or "//etc/passwd". read() resolves the target and
refuses anything that lands outside root_dir:

    full_path = (root_dir / name).resolve()
    full_path.relative_to(root_dir)   # ValueError if outside

A refused path is reported as FileAccessError, which the resolver turns
into a plain 404. The client cannot tell "outside root" from "missing".

=============================================================================
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .errors import FileAccessError
from .http.mime_types import content_type_for


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServedAsset:
    """
    One file in the store.

    Attributes:
        name: Logical filename, unique within the store ("index.html").
        content: The file's bytes.
        content_type: Content-Type inferred from the extension.
    """

    name: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)


class AssetStore:
    """
    Read-only view of the asset directory.

    Usage:
        store = AssetStore("dist")
        store.populate("assets/dist")       # optional, copies bundles
        body = store.read("index.html")     # bytes or FileAccessError
    """

    def __init__(self, root_dir: Union[str, Path]):
        self.root_dir = Path(root_dir).resolve()

    def __repr__(self) -> str:
        return f"AssetStore({str(self.root_dir)!r})"

    def exists(self) -> bool:
        """True if the store directory exists."""
        return self.root_dir.is_dir()

    def names(self) -> List[str]:
        """Sorted filenames currently in the store."""
        if not self.exists():
            return []
        return sorted(p.name for p in self.root_dir.iterdir() if p.is_file())

    def _locate(self, name: str) -> Path:
        try:
            full_path = (self.root_dir / name).resolve()
        except (OSError, ValueError) as e:
            # ValueError: embedded NUL byte
            raise FileAccessError(name, str(e)) from e
        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Refusing path outside asset root: {name!r}")
            raise FileAccessError(name, "outside asset root") from None
        return full_path

    def read(self, name: str) -> bytes:
        """
        Read an asset's bytes.

        Args:
            name: Filename relative to the store root.

        Raises:
            FileAccessError: If the file is missing, unreadable, a
                directory, or outside the store root.
        """
        full_path = self._locate(name)
        try:
            return full_path.read_bytes()
        except OSError as e:
            raise FileAccessError(name, e.strerror or str(e)) from e
        except ValueError as e:
            raise FileAccessError(name, str(e)) from e

    def asset(self, name: str) -> ServedAsset:
        """Read an asset together with its inferred content type."""
        return ServedAsset(
            name=name,
            content=self.read(name),
            content_type=content_type_for(name),
        )

    def populate(
        self,
        bundle_dir: Union[str, Path],
        names: Optional[Iterable[str]] = None,
        overwrite: bool = False,
    ) -> List[ServedAsset]:
        """
        Copy bundled resources into the store.

        =====================================================================
        BEHAVIOUR
        =====================================================================

        1. Create root_dir (and parents) if it does not exist
        2. For each bundled file, copy it unless already present
           (or always, when overwrite=True)
        3. Return the ServedAsset for every copied or kept file

        =====================================================================

        Args:
            bundle_dir: Directory holding the bundled files.
            names: Filenames to copy. Defaults to every regular file in
                   bundle_dir.
            overwrite: Replace files that already exist in the store.

        Returns:
            The populated assets, in the order they were processed.

        Raises:
            FileAccessError: If root_dir cannot be created or a bundled
                file cannot be copied.
        """
        bundle = Path(bundle_dir)
        if names is None:
            if not bundle.is_dir():
                raise FileAccessError(str(bundle), "bundle directory does not exist")
            names = sorted(p.name for p in bundle.iterdir() if p.is_file())

        if not self.exists():
            try:
                self.root_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FileAccessError(str(self.root_dir), e.strerror or str(e)) from e
            logger.info(f"Created asset directory at {self.root_dir}")

        assets = []
        for name in names:
            target = self._locate(name)
            if overwrite or not target.is_file():
                try:
                    shutil.copyfile(bundle / name, target)
                except OSError as e:
                    raise FileAccessError(name, e.strerror or str(e)) from e
                logger.debug(f"Copied {name} to {target}")
            assets.append(self.asset(name))

        logger.info(f"Asset store ready with {len(assets)} file(s): {', '.join(a.name for a in assets)}")
        return assets
