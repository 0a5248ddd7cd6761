# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Module host backends for the VST3 scanner."""

from vstscan.hosts.moduleinfo import ModuleInfoHost

__all__ = ["ModuleInfoHost"]
