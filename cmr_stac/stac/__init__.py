"""STAC presentation: request context, providers and hypermedia links."""
