"""stableplan — modular stable layout engine.

Subpackages:
  catalog   Module definitions loaded from JSON (footprint, connectors, extras).
  layout    Placement model, connector matching, overlap checks, transforms.
  web       FastAPI surface for the configurator front end.
"""
