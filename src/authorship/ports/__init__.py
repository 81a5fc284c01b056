from .blame_source import BlameSourcePort
from .identity import IdentityResolverPort

__all__ = ["BlameSourcePort", "IdentityResolverPort"]
