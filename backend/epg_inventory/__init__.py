"""EPG equipment inventory: SKU allocation service."""
