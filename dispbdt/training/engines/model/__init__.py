"""
Concrete ModelTrainEngine implementations.

This module is an organizational namespace only.
Resolve engines through `dispbdt.training.engines.registry`.
"""
