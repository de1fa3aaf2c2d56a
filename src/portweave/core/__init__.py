"""Core building blocks: errors, paths, expression IR and expression language."""
