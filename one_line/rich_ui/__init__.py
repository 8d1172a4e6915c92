"""Rich UI components for one-line."""
from .renderer import CommandRenderer
from .prompts import ask_name, ask_steps, confirm

__all__ = ['CommandRenderer', 'ask_name', 'ask_steps', 'confirm']
