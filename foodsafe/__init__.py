# -*- coding: utf-8 -*-
"""
FoodSafe - Food Safety Quality Management Core
==============================================

Product traceability and recall-risk evaluation for food-safety quality
management: genealogy and supply-chain graphs, lineage traversal, recall
risk tiering, and FSMA 204 compliance validation.

Subpackages:
    - traceability: graph builders, traversal, risk and rule engines
    - exceptions: FoodSafe exception hierarchy
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
