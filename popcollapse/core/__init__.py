"""Core data handling for population collapse.

Submodules:
- distances: Distance matrix loading and normalization
- dataset: Collaborator dataset adapters
- recode: Reassignment table I/O and label recoding
"""

__all__ = ['distances', 'dataset', 'recode']
