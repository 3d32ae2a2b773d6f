"""UniEats campus food-ordering backend.

Enterprise sign-in, a local user directory reconciled with the identity
provider, session-backed API authorization, and restaurant/order data.
"""

__version__ = "0.1.0"
