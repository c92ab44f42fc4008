"""
Image transform module for orientkit.
"""
from .orientation import OrientationResolver
from .engine import (
    PillowEngine,
    JpegtranEngine,
    apply_descriptor,
    select_engine,
)

__all__ = [
    'OrientationResolver',
    'PillowEngine',
    'JpegtranEngine',
    'apply_descriptor',
    'select_engine',
]
