"""HTTP layer: dependencies, upload staging and route modules."""
