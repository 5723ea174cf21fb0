# services/__init__.py
"""Services package for the deal ledger"""

from . import storage
from . import repositories
from . import ledger

__all__ = ['storage', 'repositories', 'ledger']
