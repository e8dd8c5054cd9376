from litterwarden.models.base import IDModel
from litterwarden.models.enums import Priority
from litterwarden.models.report import Report

__all__ = [
    'IDModel',
    'Priority',
    'Report',
]
