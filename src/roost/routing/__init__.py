"""Routing — ordered route table of method/path layers.

Layers are registered during setup and frozen when the server first
serves a request.
"""

from roost.routing.route import Callback, Layer, LayerMatch, Next, PathConfig
from roost.routing.router import Continuation, Router

__all__ = ["Callback", "Continuation", "Layer", "LayerMatch", "Next", "PathConfig", "Router"]
