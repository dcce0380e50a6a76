"""
Swiff - Split & Balance Engine

The computational core of the Swiff bill-splitting application.

DESIGN PRINCIPLES:
1. Every bill reconciles to the cent
2. User mistakes are returned, never raised
3. Balances are always recomputed from the current unpaid bills
4. Storage is somebody else's job (but the interface lives here)
5. Every flow step is auditable
"""

__version__ = "1.0.0"
__author__ = "Swiff Team"
