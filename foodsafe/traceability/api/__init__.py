# -*- coding: utf-8 -*-
"""FastAPI router for the FoodSafe traceability service."""

from foodsafe.traceability.api.router import router

__all__ = ["router"]
