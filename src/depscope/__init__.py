"""depscope: attribute the imports of a polyglot repository to external libraries."""

__version__ = "0.1.0"
