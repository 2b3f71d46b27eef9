"""
RLM backend: document chunking, session navigation and result aggregation
for processing documents larger than a model's context window.
"""

__version__ = "0.1.0"
