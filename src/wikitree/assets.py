"""Bundled standard files.

The package ships the stylesheet and the customizable page fragments that
every content root needs. They are installed into the root's assets
directory, and the customizable ones copied to the root, when missing.
"""

import logging
import shutil
from importlib.resources import files
from pathlib import Path

from wikitree.core.layout import ContentLayout

logger = logging.getLogger(__name__)

STANDARD_FILES = (
    "wikitree.css",
    "template.html",
    "header.html",
    "footer.html",
    "style.css",
)

CUSTOMIZABLE_FILES = (
    "template.html",
    "header.html",
    "footer.html",
    "style.css",
)


def get_static_dir() -> Path:
    """Return path to bundled static files.

    Returns:
        Path to the static directory containing the standard files.

    Raises:
        FileNotFoundError: If static files are not bundled.
    """
    static = files("wikitree").joinpath("static")
    if not static.is_dir():
        msg = "Bundled static files not found. Reinstall the wikitree package."
        raise FileNotFoundError(msg)
    return Path(str(static))


def install_standard_files(layout: ContentLayout) -> list[Path]:
    """Ensure standard and customizable files exist under a content root.

    Existing files are never overwritten, so local customizations survive.

    Args:
        layout: Layout of the content root

    Returns:
        Paths of the files that were created
    """
    static_dir = get_static_dir()
    created: list[Path] = []

    for name in STANDARD_FILES:
        target = layout.assets_dir / name
        if not target.exists():
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(static_dir / name, target)
            created.append(target)

    for name in CUSTOMIZABLE_FILES:
        target = layout.root / name
        if not target.exists():
            shutil.copyfile(layout.assets_dir / name, target)
            created.append(target)

    if created:
        logger.info(f"Installed {len(created)} standard files under {layout.root}")
    return created
