"""Three-stage line trimming pipeline.

This package holds the handoff channel, the source reader, transformer
and sink writer stages, and the lifecycle controller that wires them.
"""
