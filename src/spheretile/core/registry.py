# The registry of level source classes
LEVEL_SOURCE_REGISTRY = {}

def register_level_source(kind: str):
    def deco(cls):
        LEVEL_SOURCE_REGISTRY[kind] = cls
        return cls
    return deco

def create_level_source(kind: str, config, spec, rng=None, logger=None):
    """Instantiate the level source registered under ``kind``."""
    # Importing the modules triggers registration
    import spheretile.game.levels  # noqa: F401
    import spheretile.services.challenge  # noqa: F401

    if kind not in LEVEL_SOURCE_REGISTRY:
        raise ValueError(
            f"Unknown level source '{kind}'. Available: {sorted(LEVEL_SOURCE_REGISTRY)}"
        )
    return LEVEL_SOURCE_REGISTRY[kind](config, spec, rng, logger=logger)
