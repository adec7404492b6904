"""Interactive hosts for the map canvas."""

from .controller import DragState, InteractionController

__all__ = ['DragState', 'InteractionController']
