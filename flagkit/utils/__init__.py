"""Feature store wrapper with caching, and dependency ordering for non-atomic store cores."""