from .skills import ContextFactory, register_skill_routes

__all__ = ["ContextFactory", "register_skill_routes"]
