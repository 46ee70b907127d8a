"""Client core: models, board ordering, cache, sync and session handling."""
