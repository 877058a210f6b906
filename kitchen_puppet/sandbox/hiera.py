"""
Hiera staging: the hierarchy descriptor and the single data file.
"""

import logging
import posixpath
from pathlib import Path
from typing import Any, Mapping

import yaml

logger = logging.getLogger(__name__)

HIERADATA_DIR = "hieradata"
HIERARCHY_LEVEL = "base"

# Symbol keys must stay unquoted for Hiera to read them as symbols,
# which rules out dumping this one through PyYAML.
HIERA_CONFIG_TEMPLATE = """---
:backends:
  - yaml

:hierarchy:
  - {level}

:yaml:
  :datadir: {datadir}
"""


def render_hiera_config(remote_path: str) -> str:
    """Render hiera.yaml with a datadir under the instance-side sandbox path."""
    return HIERA_CONFIG_TEMPLATE.format(
        level=HIERARCHY_LEVEL,
        datadir=posixpath.join(remote_path, HIERADATA_DIR),
    )


def render_hiera_data(data: Mapping[Any, Any]) -> str:
    """Serialize instance data as YAML with every top-level key as a string."""
    normalized = {str(key): value for key, value in data.items()}
    return yaml.safe_dump(normalized, default_flow_style=False, sort_keys=False)


def stage_hiera(sandbox_path: Path, data: Mapping[Any, Any], remote_path: str) -> None:
    """
    Write hieradata/base.yaml and hiera.yaml into the sandbox.

    Args:
        sandbox_path: Local sandbox directory
        data: The instance's Hiera key/value configuration
        remote_path: Where the sandbox will live on the instance
    """
    sandbox_path = Path(sandbox_path)
    datadir = sandbox_path / HIERADATA_DIR
    datadir.mkdir(parents=True, exist_ok=True)

    data_file = datadir / f"{HIERARCHY_LEVEL}.yaml"
    data_file.write_text(render_hiera_data(data), encoding="utf-8")
    logger.debug(f"Wrote {len(data)} hiera key(s) to {data_file}")

    (sandbox_path / "hiera.yaml").write_text(render_hiera_config(remote_path), encoding="utf-8")
