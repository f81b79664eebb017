"""
ServiceBlock and ParsedCaddyfile — result of the wildcard/handle parser.
"""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ServiceBlock:
    """One `handle @name { ... }` block routed by a named host matcher."""

    matcher_name: str               # "@app"
    hostname: str                   # "app.example.com"
    description: Optional[str] = None
    directives: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "matcherName": self.matcher_name,
            "hostname": self.hostname,
            "description": self.description,
            "directives": list(self.directives),
        }


@dataclass
class ParsedCaddyfile:
    """Wildcard site with its services."""

    main_address: str
    global_directives: List[str] = field(default_factory=list)
    services: List[ServiceBlock] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "mainAddress": self.main_address,
            "globalDirectives": list(self.global_directives),
            "services": [s.to_dict() for s in self.services],
        }
