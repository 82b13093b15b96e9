"""IAVL state-commit building blocks: AVL nodes, iteration, node layouts, proofs, options and configuration."""

__version__ = "0.1.0"