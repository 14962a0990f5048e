"""
Vote Cart Engine - stage, cost and check token-weighted votes before submitting them

Holds the pending deposits on blockchain claims for one subject, computes
their exact cost including fees, creation costs and redemptions, decides
which of them the balance can pay for, and enforces the one-direction-per-
claim rule across two pricing curves.

Fun fact: Every amount here is an integer count of wei (10**-18 of a
token) - floating point never touches the money.
"""

from vote_cart.session import CartSnapshot, VoteSession

__version__ = "0.1.0"
__all__ = ["VoteSession", "CartSnapshot", "__version__"]
