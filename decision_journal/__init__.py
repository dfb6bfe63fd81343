"""Decision Journal: decision logging, AI recommendations and reflection analytics."""
