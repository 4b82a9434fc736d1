# Models package init
"""
Importing this package registers every table with `Base.metadata`
(used by `init_models()` and Alembic autogenerate).
"""

from combs_of_honey.models.comb import Comb
from combs_of_honey.models.honey import Honey

__all__ = ["Comb", "Honey"]
