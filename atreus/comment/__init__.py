"""Comments on videos: use case, SQLite storage with a Redis cache, and service replies."""