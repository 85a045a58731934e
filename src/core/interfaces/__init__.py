"""Core interfaces.

`Protocol` contracts implemented by the adapters (git, helm) so the pipeline
depends on abstractions and can be exercised with fakes.
"""
