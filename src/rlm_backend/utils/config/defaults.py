"""
Built-in configuration defaults.

A user configuration file only needs to name the values it changes; it is
deep-merged over DEFAULT_CONFIG.
"""

from typing import Any, Dict

DEFAULT_CONFIG: Dict[str, Any] = {
    "session": {
        # None means the user's home directory
        "directory": None,
    },
    "chunking": {
        "default_strategy": "uniform",
        "chunk_size": 50000,
        "overlap": 0,
        "context_size": 500,
        "min_level": 1,
        "max_level": 3,
        "min_size": 0,
        "max_size": 0,
        "merge_small": False,
        "max_tokens": 512,
        "overlap_tokens": 50,
        "min_chunk_size": 100,
        "token_encoding": "cl100k_base",
    },
    "results": {
        "separator": "\n\n---\n\n",
    },
    "logging": {
        "level": "WARNING",
        "format": "standard",
        "file": None,
    },
}
