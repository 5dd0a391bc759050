"""Domain layer - collections, records and the rules that govern them."""
