"""Domain models.

Pure data structures (Pydantic v2): chart inputs, generated files and the
results of the publish/lint steps. No filesystem, subprocess or CLI here.
"""
