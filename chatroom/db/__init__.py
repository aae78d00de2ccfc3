"""MySQL connection pooling."""