"""Wire transports used by the DNS client (UDP and TCP)."""
