"""
intent-spine command line.

Commands:
    intent-spine catalog list|show   ─ browse the action catalog
    intent-spine convert FILE         ─ check indexer records against the converter
    intent-spine config show|check    ─ resolved settings and package ids
"""

from intent_spine.cli.app import app

__all__ = ["app"]
