"""Published videos: use case, SQLite storage and service replies."""