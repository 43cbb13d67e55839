from .file import FileRecord
from .problem import ProblemRecord, ImportedProblem, DistractorEntry
from .progress import ProgressRecord, Outcome
from .settings import Settings, ColumnMapping, OrderMode

__all__ = [
    'FileRecord', 'ProblemRecord', 'ImportedProblem', 'DistractorEntry',
    'ProgressRecord', 'Outcome', 'Settings', 'ColumnMapping', 'OrderMode',
]
