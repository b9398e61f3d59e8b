"""LingoChat - translated streaming chat backend and client"""

__version__ = "1.0.0"
