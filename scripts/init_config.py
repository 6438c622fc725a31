#!/usr/bin/env python3
"""
Write a default agentic RAG configuration file if none exists.

Usage:
    python scripts/init_config.py [path]
"""

import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from agentic_rag.config import DEFAULT_CONFIG_PATH, AgenticRAGConfig  # noqa: E402


def init_config(path: Path = DEFAULT_CONFIG_PATH) -> bool:
    """Create the config file at ``path``. Returns False if it already existed."""
    if path.exists():
        print(f"Config already exists at {path}", file=sys.stderr)
        return False

    AgenticRAGConfig().save(path)
    print(f"Created agentic RAG config at {path}", file=sys.stderr)
    return True


if __name__ == "__main__":
    target = Path(sys.argv[1]).expanduser() if len(sys.argv) > 1 else DEFAULT_CONFIG_PATH
    init_config(target)
